"""
Tests for the config module.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.outlook_features.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in ("OUTPUT_DIR", "PREDICTION_FOLDERS", "PREDICTION_WINDOW_DAYS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.output_dir == Path(".")
        assert settings.dataset_path == Path("EmailDataset.csv")
        assert settings.predictions_path == Path("EmailDatasetPredictions.csv")
        assert settings.prediction_folder_list == ["Whereabouts", "Inbox"]
        assert settings.prediction_window_days == 2

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TEST_FOLDER_NAME", "Test")
        monkeypatch.setenv("SCORING_BASE_ADDRESS", "https://scoring.example.com")
        monkeypatch.setenv("SCORING_TIMEOUT", "12.5")
        monkeypatch.setenv("OUTPUT_DIR", "/tmp/features")

        settings = Settings(_env_file=None)

        assert settings.test_folder_name == "Test"
        assert settings.scoring_base_address == "https://scoring.example.com"
        assert settings.scoring_timeout == 12.5
        assert settings.dataset_path == Path("/tmp/features/EmailDataset.csv")

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TEST_FOLDER_NAME=Quarantine\nGRAPH_PAGE_SIZE=200\n")

        settings = Settings(_env_file=env_file)

        assert settings.test_folder_name == "Quarantine"
        assert settings.graph_page_size == 200

    def test_prediction_folder_list_strips_names(self):
        settings = Settings(_env_file=None, prediction_folders=" Inbox , ,Whereabouts ")
        assert settings.prediction_folder_list == ["Inbox", "Whereabouts"]

    def test_prediction_folder_list_keeps_case(self):
        settings = Settings(_env_file=None, prediction_folders="inbox,Inbox")
        assert settings.prediction_folder_list == ["inbox", "Inbox"]

    def test_empty_prediction_folders(self):
        settings = Settings(_env_file=None, prediction_folders="")
        assert settings.prediction_folder_list == []

    @pytest.mark.parametrize(
        "field, value",
        [
            ("scoring_timeout", 0),
            ("graph_page_size", 0),
            ("prediction_window_days", -1),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
