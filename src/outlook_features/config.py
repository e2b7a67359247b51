"""Application configuration and settings.

Objective:
    Provide a single source of truth for runtime configuration used across the
    application (mailbox source, feature labeling, scoring endpoint, and output
    locations).

Responsibilities:
    - Load environment-driven settings via :class:`Settings` (Pydantic
      BaseSettings).
    - Provide small convenience helpers for derived settings (e.g., parsing the
      comma-separated list of prediction folders, resolving output paths).

High-level call tree:
    - :func:`get_settings` -> returns :class:`Settings`
    - :class:`Settings`
        - :attr:`Settings.prediction_folder_list`
        - :attr:`Settings.dataset_path`
        - :attr:`Settings.predictions_path`

Operational notes:
    - ``Settings`` loads from ``.env`` by default via ``pydantic-settings``.
    - Values such as the test folder name, API key and base address are passed
      through to the core components as plain strings; nothing below the
      orchestrator reads the environment.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_DATASET_FILENAME = "EmailDataset.csv"
DEFAULT_PREDICTIONS_FILENAME = "EmailDatasetPredictions.csv"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The settings model is intentionally flat and human-editable via `.env`.
    Most fields map directly to environment variables.

    Attributes:
        test_folder_name: Folder whose messages are labeled ``TestFolder=True``.
        scoring_api_key: Bearer token for the scoring service.
        scoring_base_address: URL the scoring request is POSTed to.
        scoring_timeout: Optional per-request timeout in seconds.
        strict_scoring_responses: Abort the run on a malformed scoring body.
        graph_access_token: Pre-issued Microsoft Graph access token.
        graph_root_folder: Graph folder id or well-known name to start from.
        graph_page_size: Messages requested per Graph page.
        mailbox_snapshot_path: JSON mailbox snapshot to read instead of Graph.
        output_dir: Directory the tables are written to.
        dataset_filename: File name of the feature table.
        predictions_filename: File name of the prediction table.
        prediction_folders: Comma-separated folder names selected for scoring.
        prediction_window_days: Only messages received this recently are scored.
        log_level: Logging level.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Feature labeling
    test_folder_name: str = Field(
        default="", description="Folder name whose messages are marked as test data"
    )

    # Scoring service
    scoring_api_key: str = Field(default="", description="Scoring service API key")
    scoring_base_address: str = Field(
        default="", description="Scoring service endpoint URL"
    )
    scoring_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description=(
            "Timeout in seconds for each scoring request. "
            "When unset, requests waits for as long as the transport allows."
        ),
    )
    strict_scoring_responses: bool = Field(
        default=False,
        description=(
            "Treat a malformed success response from the scoring service as fatal. "
            "By default the record is kept with an empty prediction."
        ),
    )

    # Mailbox source
    graph_access_token: Optional[str] = Field(
        default=None, description="Microsoft Graph access token (issued externally)"
    )
    graph_root_folder: str = Field(
        default="inbox", description="Graph folder id or well-known name to walk"
    )
    graph_page_size: int = Field(
        default=50, ge=1, le=1000, description="Messages per Graph page"
    )
    mailbox_snapshot_path: Optional[Path] = Field(
        default=None, description="JSON mailbox snapshot used instead of Graph"
    )

    # Output
    output_dir: Path = Field(default=Path("."), description="Output directory")
    dataset_filename: str = Field(default=DEFAULT_DATASET_FILENAME)
    predictions_filename: str = Field(default=DEFAULT_PREDICTIONS_FILENAME)

    # Prediction selection
    prediction_folders: str = Field(
        default="Whereabouts,Inbox",
        description="Comma-separated folder names whose messages are scored",
    )
    prediction_window_days: float = Field(
        default=2, ge=0, description="Score messages received within this many days"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def prediction_folder_list(self) -> list[str]:
        """
        Parse prediction folder names from comma-separated string.

        Folder names are compared exactly by the prediction filter, so only
        surrounding whitespace is stripped (case is preserved).

        Returns:
            list[str]: List of folder names.
        """
        if not self.prediction_folders:
            return []
        return [name.strip() for name in self.prediction_folders.split(",") if name.strip()]

    @property
    def dataset_path(self) -> Path:
        """Destination of the feature table."""
        return self.output_dir / self.dataset_filename

    @property
    def predictions_path(self) -> Path:
        """Destination of the prediction table."""
        return self.output_dir / self.predictions_filename


def get_settings() -> Settings:
    """
    Load and return application settings.

    For tests, construct a :class:`Settings` instance directly or pass a mocked
    settings object.

    Returns:
        Settings: Application settings instance.

    Raises:
        ValidationError: If an environment variable holds an invalid value.
    """
    return Settings()
