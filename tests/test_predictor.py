"""
Tests for the predictor module.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from src.outlook_features.predictor import PredictionRunner, recent_in_folders
from src.outlook_features.scoring import FEATURE_VECTOR_KEYS

NOW = datetime(2026, 10, 19, 12, 0)


def _record(folder: str, received: datetime, subject: str) -> dict:
    """Create a feature record with every scored feature."""
    return {
        "TestFolder": False,
        "HasAttachments": False,
        "SentDirect": True,
        "MayContainATime": False,
        "ReceivedHour": received.hour,
        "SubjectWordCount": 1,
        "SenderDomain": "example.com",
        "HasCC": False,
        "SpecialCharacterCount": 0,
        "Received": received,
        "Subject": subject,
        "FolderName": folder,
    }


class TestRecentInFolders:
    """Tests for the recent_in_folders predicate."""

    def test_selects_recent_records_in_named_folders(self):
        predicate = recent_in_folders(["Inbox", "Whereabouts"], 2, now=NOW)

        assert predicate(_record("Inbox", NOW - timedelta(days=1), "a")) is True
        assert predicate(_record("Whereabouts", NOW - timedelta(days=2), "b")) is True
        assert predicate(_record("Inbox", NOW - timedelta(days=3), "c")) is False
        assert predicate(_record("Archive", NOW, "d")) is False

    def test_folder_match_is_exact(self):
        predicate = recent_in_folders(["Inbox"], 2, now=NOW)
        assert predicate(_record("inbox", NOW, "a")) is False

    def test_aware_timestamps_use_current_time(self):
        predicate = recent_in_folders(["Inbox"], 2)
        received = datetime.now(timezone.utc) - timedelta(hours=1)

        assert predicate(_record("Inbox", received, "a")) is True

    def test_naive_now_with_aware_timestamps(self):
        now_utc = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        naive_now = now_utc.astimezone().replace(tzinfo=None)
        predicate = recent_in_folders(["Inbox"], 2, now=naive_now)

        assert predicate(_record("Inbox", now_utc - timedelta(days=1), "a")) is True
        assert predicate(_record("Inbox", now_utc - timedelta(days=3), "b")) is False

    def test_aware_now_with_naive_timestamps(self):
        now_utc = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        local_now = now_utc.astimezone().replace(tzinfo=None)
        predicate = recent_in_folders(["Inbox"], 2, now=now_utc)

        assert predicate(_record("Inbox", local_now - timedelta(days=1), "a")) is True
        assert predicate(_record("Inbox", local_now - timedelta(days=3), "b")) is False


class TestPredictionRunner:
    """Tests for PredictionRunner.run."""

    def test_scores_selected_records_in_order(self):
        client = MagicMock()
        client.score.side_effect = [0.1, None]

        records = [
            _record("Inbox", NOW, "first"),
            _record("Archive", NOW, "skipped"),
            _record("Inbox", NOW, "second"),
        ]

        predicted = PredictionRunner(client).run(
            records, lambda r: r["FolderName"] == "Inbox"
        )

        assert [r["Subject"] for r in predicted] == ["first", "second"]
        assert [r["Result"] for r in predicted] == [0.1, None]
        assert list(predicted[0].keys())[-1] == "Result"

    def test_sends_nine_feature_vector(self):
        client = MagicMock()
        client.score.return_value = 1.0

        PredictionRunner(client).run([_record("Inbox", NOW, "x")], lambda r: True)

        (vector,), _ = client.score.call_args
        assert tuple(vector.keys()) == FEATURE_VECTOR_KEYS
        assert vector["SentDirect"] == "1"
        assert vector["HasCC"] == "0"

    def test_does_not_modify_source_records(self):
        client = MagicMock()
        client.score.return_value = 0.5
        record = _record("Inbox", NOW, "x")

        PredictionRunner(client).run([record], lambda r: True)

        assert "Result" not in record

    def test_no_selection_makes_no_calls(self):
        client = MagicMock()

        predicted = PredictionRunner(client).run(
            [_record("Archive", NOW, "x")], lambda r: False
        )

        assert predicted == []
        client.score.assert_not_called()
