"""Workflow orchestrator.

Objective:
    Coordinate the end-to-end workflow:
    1) Open the mailbox (snapshot file or Microsoft Graph)
    2) Walk the folder tree and extract one feature record per message
    3) Write the feature table
    4) Optionally score recent records from selected folders
    5) Write the prediction table

Responsibilities:
    - Compose the core components (mailbox, walker, dataset, scoring client,
      prediction runner).
    - Provide an imperative API (:meth:`FeatureOrchestrator.run`) that can be
      called from the CLI or other scripts.

High-level call tree:
    - :class:`FeatureOrchestrator`
        - :meth:`FeatureOrchestrator.run`
            - :meth:`FeatureOrchestrator.build_dataset`
                - :meth:`FolderWalker.walk`
            - :meth:`FeatureOrchestrator.export_dataset`
                - :func:`write_table`
            - (optional) :meth:`FeatureOrchestrator.run_predictions`
                - :meth:`PredictionRunner.run`
            - (optional) :meth:`FeatureOrchestrator.export_predictions`
    - :func:`run_extraction` convenience wrapper

Operational notes:
    - The scoring client is created on first use, so extraction-only runs do
      not need scoring settings.
    - The orchestrator does not persist state between runs; each run replaces
      the output tables.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import Settings, get_settings
from .dataset import DatasetBuilder
from .mailbox import Mailbox, open_mailbox
from .models import FeatureRecord
from .predictor import PredictionRunner, RecordPredicate, recent_in_folders
from .scoring import ScoringClient
from .table import write_table
from .walker import FolderWalker, WalkStats

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """
    Outcome of one orchestrated run.

    Attributes:
        records: Number of rows in the feature table.
        dataset_path: Where the feature table was written (None when empty).
        walk_stats: Traversal counters.
        predictions: Prediction rows (empty unless scoring ran).
        predictions_path: Where the prediction table was written.
    """

    records: int = 0
    dataset_path: Optional[Path] = None
    walk_stats: WalkStats = field(default_factory=WalkStats)
    predictions: list[FeatureRecord] = field(default_factory=list)
    predictions_path: Optional[Path] = None


class FeatureOrchestrator:
    """
    Orchestrates feature extraction and prediction.

    This class is intentionally "glue" code: it connects the mailbox, walker,
    table encoder and scoring client without embedding feature rules.

    Attributes:
        settings: Application settings.
        mailbox: Mailbox being read.
        walker: Folder walker.
        last_walk_stats: Counters from the latest :meth:`build_dataset`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        mailbox: Optional[Mailbox] = None,
    ) -> None:
        """
        Initialize orchestrator with all components.

        Args:
            settings: Application settings (loads from env if None).
            mailbox: Mailbox to read (opened from settings if None).
        """
        self.settings = settings or get_settings()
        self.mailbox = mailbox or open_mailbox(self.settings)
        self.walker = FolderWalker(self.settings.test_folder_name)
        self.last_walk_stats = WalkStats()
        self._scoring_client: Optional[ScoringClient] = None

    @property
    def scoring_client(self) -> ScoringClient:
        """Scoring client, created from settings on first access."""
        if self._scoring_client is None:
            self._scoring_client = ScoringClient(self.settings)
        return self._scoring_client

    def build_dataset(self) -> DatasetBuilder:
        """
        Walk the whole mailbox and collect feature records.

        Returns:
            DatasetBuilder: Records in traversal order.
        """
        current_user = self.mailbox.current_user_address()
        root = self.mailbox.root_folder()
        logger.info(f"Extracting features for {current_user} from folder {root.name}")

        dataset = DatasetBuilder()
        self.last_walk_stats = self.walker.walk(current_user, root, dataset)
        return dataset

    def export_dataset(
        self,
        dataset: Optional[DatasetBuilder] = None,
        destination: Optional[Path] = None,
    ) -> Optional[Path]:
        """
        Write the feature table.

        Args:
            dataset: Records to write (built from the mailbox if None).
            destination: Output path (``settings.dataset_path`` if None).

        Returns:
            Optional[Path]: Written path, or None when there were no records.
        """
        if dataset is None:
            dataset = self.build_dataset()

        if not len(dataset):
            logger.warning("No feature records extracted; dataset not written")
            return None

        return write_table(dataset.records, destination or self.settings.dataset_path)

    def run_predictions(
        self,
        records: list[FeatureRecord],
        predicate: Optional[RecordPredicate] = None,
    ) -> list[FeatureRecord]:
        """
        Score the selected records.

        By default, records from ``settings.prediction_folder_list`` received
        within ``settings.prediction_window_days`` are selected.

        Args:
            records: Extracted records.
            predicate: Record selector (settings-based default if None).

        Returns:
            list[FeatureRecord]: Selected records with a ``Result`` column.
        """
        if predicate is None:
            predicate = recent_in_folders(
                self.settings.prediction_folder_list,
                self.settings.prediction_window_days,
            )

        runner = PredictionRunner(self.scoring_client)
        return runner.run(records, predicate)

    def export_predictions(
        self,
        predictions: list[FeatureRecord],
        destination: Optional[Path] = None,
    ) -> Optional[Path]:
        """
        Write the prediction table.

        Args:
            predictions: Output of :meth:`run_predictions`.
            destination: Output path (``settings.predictions_path`` if None).

        Returns:
            Optional[Path]: Written path, or None when nothing was scored.
        """
        if not predictions:
            logger.info("No records selected for scoring; predictions not written")
            return None

        return write_table(predictions, destination or self.settings.predictions_path)

    def run(
        self,
        predict: bool = False,
        predicate: Optional[RecordPredicate] = None,
    ) -> RunSummary:
        """Run extraction and, optionally, prediction.

        Args:
            predict: Also score selected records and write the prediction
                table.
            predicate: Record selector for scoring (settings-based default if
                None).

        Returns:
            RunSummary: Counts and written paths.
        """
        dataset = self.build_dataset()
        summary = RunSummary(
            records=len(dataset),
            dataset_path=self.export_dataset(dataset),
            walk_stats=self.last_walk_stats,
        )

        if predict:
            summary.predictions = self.run_predictions(dataset.records, predicate)
            summary.predictions_path = self.export_predictions(summary.predictions)

        logger.info(
            f"Completed: {summary.records} records, {len(summary.predictions)} predictions"
        )
        return summary


def run_extraction(
    settings: Optional[Settings] = None,
    predict: bool = False,
) -> RunSummary:
    """Convenience wrapper to run the extractor.

    Args:
        settings: Application settings (loads from env if None).
        predict: Also score and write the prediction table.

    Returns:
        RunSummary: Counts and written paths.
    """
    orchestrator = FeatureOrchestrator(settings=settings)
    return orchestrator.run(predict=predict)
