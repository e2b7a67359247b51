"""Mailbox capability and snapshot adapter.

Objective:
    Define the read-only interface the feature pipeline consumes from a
    message store, and provide an in-memory implementation backed by a JSON
    snapshot.

Responsibilities:
    - :class:`Mailbox` protocol: current user address + root folder tree.
    - :class:`SnapshotMailbox`: in-memory mailbox, loadable from a file.
    - :func:`save_snapshot`: freeze any mailbox to JSON for offline runs.
    - :func:`open_mailbox`: choose an adapter from settings.

High-level call tree:
    - :func:`open_mailbox`
        - :meth:`SnapshotMailbox.from_file`
        - :class:`src.outlook_features.graph_mailbox.GraphMailbox`
            - :class:`src.outlook_features.graph_mailbox.StaticTokenAuth`

Operational notes:
    - Acquiring a Graph token is outside this project; a pre-issued token is
      read from settings.
"""

import logging
from pathlib import Path
from typing import Protocol

from .config import Settings
from .graph_mailbox import GraphMailbox, StaticTokenAuth
from .models import FolderNode, MailboxSnapshot

logger = logging.getLogger(__name__)


class Mailbox(Protocol):
    """Read-only view of a connected message store."""

    def current_user_address(self) -> str:
        """SMTP address of the mailbox owner."""
        ...

    def root_folder(self) -> FolderNode:
        """Folder the traversal starts from."""
        ...


class SnapshotMailbox:
    """
    Mailbox backed by an in-memory folder tree.

    Attributes:
        root: Root folder of the tree.
    """

    def __init__(self, current_user_address: str, root: FolderNode) -> None:
        self._current_user_address = current_user_address
        self.root = root

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotMailbox":
        """Load a mailbox written by :func:`save_snapshot`.

        Args:
            path: JSON snapshot file.

        Returns:
            SnapshotMailbox: Mailbox holding the snapshot's tree.

        Raises:
            pydantic.ValidationError: If the file does not match the snapshot
                schema.
        """
        snapshot = MailboxSnapshot.model_validate_json(
            Path(path).read_text(encoding="utf-8")
        )
        logger.debug(f"Loaded mailbox snapshot from {path}")
        return cls(snapshot.current_user_address, snapshot.root)

    def current_user_address(self) -> str:
        return self._current_user_address

    def root_folder(self) -> FolderNode:
        return self.root


def save_snapshot(mailbox: Mailbox, path: Path) -> Path:
    """Write a mailbox's user address and folder tree as JSON.

    Args:
        mailbox: Any mailbox implementation.
        path: Destination file (replaced if it exists).

    Returns:
        Path: The written path.
    """
    snapshot = MailboxSnapshot(
        current_user_address=mailbox.current_user_address(),
        root=mailbox.root_folder(),
    )

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    logger.info(f"Saved mailbox snapshot to {path}")
    return path


def open_mailbox(settings: Settings) -> Mailbox:
    """Create the mailbox adapter selected by settings.

    Selection order:
        1. ``mailbox_snapshot_path`` -> :class:`SnapshotMailbox`
        2. ``graph_access_token`` -> :class:`GraphMailbox`

    Args:
        settings: Application settings.

    Returns:
        Mailbox: Connected mailbox.

    Raises:
        ValueError: If neither source is configured.
    """
    if settings.mailbox_snapshot_path:
        logger.info(f"Reading mailbox snapshot {settings.mailbox_snapshot_path}")
        return SnapshotMailbox.from_file(settings.mailbox_snapshot_path)

    if settings.graph_access_token:
        logger.info("Reading mailbox from Microsoft Graph")
        return GraphMailbox(
            StaticTokenAuth(settings.graph_access_token),
            root_folder=settings.graph_root_folder,
            page_size=settings.graph_page_size,
        )

    raise ValueError(
        "No mailbox configured: set MAILBOX_SNAPSHOT_PATH or GRAPH_ACCESS_TOKEN"
    )
