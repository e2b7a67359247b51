"""Depth-first mailbox traversal.

Objective:
    Visit every message of a folder tree and collect one feature record per
    mail item, isolating failures to the item that caused them.

Responsibilities:
    - Visit a folder's items before its child folders, in store order
      (pre-order depth-first).
    - Skip items that are not mail messages.
    - Log and skip messages whose features cannot be extracted.
    - Append successful records to a caller-provided sink.

High-level call tree:
    - :class:`FolderWalker`
        - :meth:`FolderWalker.walk`
            - :func:`as_mail_item`
            - :func:`src.outlook_features.features.extract_record`

Operational notes:
    - Traversal uses an explicit stack, so arbitrarily deep folder trees do not
      consume native call-stack frames.
    - There is no cycle detection; folder trees are expected to have no
      back-edges.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .features import extract_record
from .models import FeatureRecord, FolderNode, MailItem

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    """Anything records can be appended to (a list, a DatasetBuilder)."""

    def append(self, record: FeatureRecord) -> None: ...


@dataclass
class WalkStats:
    """Counters collected during one traversal."""

    folders: int = 0
    extracted: int = 0
    skipped: int = 0
    failed: int = 0


def as_mail_item(item: object) -> Optional[MailItem]:
    """Return the item as a mail message, or ``None`` for any other kind.

    Args:
        item: Mailbox item of any kind.

    Returns:
        Optional[MailItem]: The item when it is a mail message.
    """
    if isinstance(item, MailItem):
        return item
    return None


class FolderWalker:
    """
    Walks a folder tree and extracts feature records.

    Attributes:
        test_folder_name: Folder whose messages are labeled as test data.
    """

    def __init__(self, test_folder_name: str) -> None:
        """
        Initialize the walker.

        Args:
            test_folder_name: Folder whose messages are labeled as test data.
        """
        self.test_folder_name = test_folder_name

    def walk(
        self,
        current_user_address: str,
        folder: FolderNode,
        sink: RecordSink,
    ) -> WalkStats:
        """Extract records for every message under ``folder``.

        A folder's own items are visited before any of its children, and
        children are visited in store order. A failing message is logged and
        skipped; it never stops the traversal.

        Args:
            current_user_address: SMTP address of the mailbox owner.
            folder: Root of the subtree to visit.
            sink: Receives one record per successfully extracted message.

        Returns:
            WalkStats: Counts of visited folders and extracted/skipped/failed
            items.
        """
        stats = WalkStats()

        stack = [folder]
        while stack:
            current = stack.pop()
            stats.folders += 1
            logger.info("Visiting folder %s (%s items)", current.name, len(current.items))

            for item in current.items:
                mail_item = as_mail_item(item)
                if mail_item is None:
                    logger.debug(
                        "Skipping non-mail item in %s (kind=%s)", current.name, item.kind
                    )
                    stats.skipped += 1
                    continue

                logger.debug("%s - %s", current.name, mail_item.subject)

                result = extract_record(
                    mail_item,
                    current_user_address,
                    self.test_folder_name,
                    current.name,
                )
                if not result.success:
                    logger.warning(
                        "Failed to extract features (folder=%s, item_id=%s, subject=%r): %s",
                        result.folder_name,
                        result.item_id,
                        result.subject,
                        result.error,
                    )
                    stats.failed += 1
                    continue

                sink.append(result.record)
                stats.extracted += 1

            # Reversed so the first child is popped (visited) first.
            stack.extend(reversed(current.children))

        logger.info(
            "Walked %s folders: %s extracted, %s skipped, %s failed",
            stats.folders,
            stats.extracted,
            stats.skipped,
            stats.failed,
        )
        return stats
