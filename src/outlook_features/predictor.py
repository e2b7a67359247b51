"""Prediction run over an extracted dataset.

Objective:
    Score a filtered subset of feature records and merge each prediction back
    into a copy of its record, ready to be written as a second table.

High-level call tree:
    - :class:`PredictionRunner`
        - :meth:`PredictionRunner.run`
            - :func:`src.outlook_features.scoring.build_feature_vector`
            - :meth:`src.outlook_features.scoring.ScoringClient.score`
    - :func:`recent_in_folders` (standard record predicate)

Operational notes:
    - Records are scored one at a time, in dataset order, so the output order
      always matches the filtered input order.
    - Source records are not modified; each output record is a copy with an
      extra ``Result`` column.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Optional

from .models import FeatureRecord
from .scoring import ScoringClient, build_feature_vector

logger = logging.getLogger(__name__)

RESULT_COLUMN = "Result"

RecordPredicate = Callable[[FeatureRecord], bool]


def recent_in_folders(
    folder_names: Iterable[str],
    days: float,
    now: Optional[datetime] = None,
) -> RecordPredicate:
    """Build a predicate selecting recent records from the given folders.

    A record matches when its ``FolderName`` is one of ``folder_names`` and its
    ``Received`` timestamp is no older than ``days``. When ``now`` is omitted
    the current time is taken in each record's own timezone. An explicit
    ``now`` may be naive or aware; it is converted to match each record,
    with naive values read as local time.

    Args:
        folder_names: Exact folder names to select.
        days: Size of the recency window.
        now: Reference time (defaults to the current time).

    Returns:
        RecordPredicate: Callable returning True for selected records.
    """
    names = set(folder_names)
    window = timedelta(days=days)

    def predicate(record: FeatureRecord) -> bool:
        if record.get("FolderName") not in names:
            return False
        received = record.get("Received")
        if received is None:
            return False
        if now is None:
            reference = datetime.now(tz=received.tzinfo)
        else:
            reference = _comparable(now, received)
        return received >= reference - window

    return predicate


def _comparable(reference: datetime, received: datetime) -> datetime:
    """Express ``reference`` with the same naive/aware kind as ``received``.

    Naive values are taken as local time.
    """
    if received.tzinfo is not None and reference.tzinfo is None:
        return reference.astimezone(received.tzinfo)
    if received.tzinfo is None and reference.tzinfo is not None:
        return reference.astimezone().replace(tzinfo=None)
    return reference


class PredictionRunner:
    """
    Scores selected records and collects the augmented copies.

    Attributes:
        scoring_client: Client used for each scoring call.
    """

    def __init__(self, scoring_client: ScoringClient) -> None:
        self.scoring_client = scoring_client

    def run(
        self,
        all_records: Iterable[FeatureRecord],
        predicate: RecordPredicate,
    ) -> list[FeatureRecord]:
        """Score every record accepted by ``predicate``.

        Args:
            all_records: Extracted records, in dataset order.
            predicate: Selects the records to score.

        Returns:
            list[FeatureRecord]: Copies of the selected records with a
            ``Result`` column holding the prediction (``None`` when scoring
            failed softly).
        """
        selected = [record for record in all_records if predicate(record)]
        logger.info(f"Scoring {len(selected)} records")

        predicted = []
        for i, record in enumerate(selected, 1):
            feature_vector = build_feature_vector(record)
            result = self.scoring_client.score(feature_vector)

            output = dict(record)
            output[RESULT_COLUMN] = result
            predicted.append(output)

            logger.info(
                "Prediction %s/%s for %r: %s",
                i,
                len(selected),
                record.get("Subject"),
                result,
            )

        missing = sum(1 for r in predicted if r[RESULT_COLUMN] is None)
        logger.info(f"Scored {len(predicted)} records ({missing} without prediction)")
        return predicted
