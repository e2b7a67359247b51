import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from src.outlook_features.config import Settings
from src.outlook_features.graph_mailbox import GraphMailbox
from src.outlook_features.mailbox import SnapshotMailbox, open_mailbox, save_snapshot
from src.outlook_features.models import FolderNode, MailItem, OtherItem, Recipient


@pytest.fixture
def mailbox() -> SnapshotMailbox:
    """Small mailbox with a nested folder and a non-mail item."""
    root = FolderNode(
        name="Inbox",
        items=[
            MailItem(
                id="m1",
                subject="Hello",
                body="Body text",
                attachment_count=1,
                recipients=[Recipient(name="Me", smtp_address="me@example.com")],
                sender_email_address="alice@example.com",
                cc="Bob",
                received_time=datetime(2026, 10, 18, 8, 5),
            ),
            OtherItem(kind="appointment", id="a1", subject="Standup"),
        ],
        children=[FolderNode(name="Archive")],
    )
    return SnapshotMailbox("me@example.com", root)


def test_snapshot_round_trip(tmp_path, mailbox) -> None:
    """Ensure a saved snapshot loads back to the same tree."""

    path = save_snapshot(mailbox, tmp_path / "nested" / "mailbox.json")
    loaded = SnapshotMailbox.from_file(path)

    assert loaded.current_user_address() == "me@example.com"
    assert loaded.root_folder() == mailbox.root_folder()


def test_snapshot_uses_camel_case_keys(tmp_path, mailbox) -> None:
    """Ensure snapshot files use the documented JSON field names."""

    path = save_snapshot(mailbox, tmp_path / "mailbox.json")
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["currentUserAddress"] == "me@example.com"
    message = data["root"]["items"][0]
    assert message["kind"] == "mail"
    assert message["receivedTime"] == "2026-10-18T08:05:00"
    assert message["recipients"][0]["smtpAddress"] == "me@example.com"
    assert data["root"]["items"][1]["kind"] == "appointment"


def test_invalid_snapshot_raises(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"currentUserAddress": "me@example.com"}', encoding="utf-8")

    with pytest.raises(ValidationError):
        SnapshotMailbox.from_file(path)


def test_open_mailbox_prefers_snapshot(tmp_path, mailbox) -> None:
    """Ensure a configured snapshot wins over a Graph token."""

    path = save_snapshot(mailbox, tmp_path / "mailbox.json")
    settings = Settings(
        _env_file=None,
        mailbox_snapshot_path=path,
        graph_access_token="token",
    )

    opened = open_mailbox(settings)

    assert isinstance(opened, SnapshotMailbox)
    assert opened.root_folder().name == "Inbox"


def test_open_mailbox_uses_graph_token() -> None:
    settings = Settings(
        _env_file=None,
        mailbox_snapshot_path=None,
        graph_access_token="token",
        graph_root_folder="archive",
        graph_page_size=25,
    )

    opened = open_mailbox(settings)

    assert isinstance(opened, GraphMailbox)
    assert opened.root_folder_id == "archive"
    assert opened.page_size == 25
    assert opened.auth.get_auth_headers()["Authorization"] == "Bearer token"


def test_open_mailbox_without_source_raises() -> None:
    settings = Settings(_env_file=None, mailbox_snapshot_path=None, graph_access_token=None)

    with pytest.raises(ValueError, match="No mailbox configured"):
        open_mailbox(settings)
