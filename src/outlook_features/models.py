"""Pydantic data models used across the application.

Objective:
    Centralize all strongly-typed data structures representing:
    - Mailbox content (folders and the items they hold)
    - Per-item extraction outcomes produced by the folder walker
    - The request body sent to the scoring service

Design notes:
    - Mailbox items form a tagged union discriminated by ``kind``. Only
      :class:`MailItem` carries message fields; every other Outlook item type
      (appointments, meeting requests, contacts, ...) is an :class:`OtherItem`.
    - Models use camelCase aliases so mailbox snapshots read naturally as JSON
      (``receivedTime`` -> :attr:`MailItem.received_time`).
    - ``model_config = ConfigDict(populate_by_name=True)`` is used to allow
      constructing models with either alias names or pythonic field names.
    - A feature record is a plain ordered ``dict``; insertion order is the
      column order of the output table.

High-level structure:
    - Mailbox primitives:
        - :class:`Importance`, :class:`BodyFormat`
        - :class:`Recipient`
        - :class:`MailItem`, :class:`OtherItem`, :data:`MailboxItem`
        - :class:`FolderNode`
        - :class:`MailboxSnapshot`
    - Extraction primitives:
        - :data:`FeatureRecord`
        - :class:`ExtractionResult`
    - Scoring primitives:
        - :class:`ScoreData`
        - :class:`ScoreRequest`
"""

from datetime import datetime
from enum import IntEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

FeatureRecord = dict[str, Any]


class Importance(IntEnum):
    """Outlook message importance codes."""

    LOW = 0
    NORMAL = 1
    HIGH = 2


class BodyFormat(IntEnum):
    """Outlook message body format codes."""

    UNSPECIFIED = 0
    PLAIN = 1
    HTML = 2
    RICH_TEXT = 3


class Recipient(BaseModel):
    """One entry of a message's recipient list.

    ``smtp_address`` is ``None`` when the address could not be resolved to an
    SMTP address (e.g. an unresolved Exchange entry).
    """

    name: str = ""
    smtp_address: Optional[str] = Field(default=None, alias="smtpAddress")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class MailItem(BaseModel):
    """
    Read-only view of one mail message.

    Attributes:
        id: Store-specific item ID (diagnostics only).
        subject: Subject line.
        body: Plain-text body.
        attachment_count: Number of attachments.
        recipients: To, Cc and Bcc recipients in store order.
        sender_email_address: Sender address as reported by the store.
        cc: Cc display string (names separated by ``"; "``).
        importance: Importance code.
        body_format: Body format code.
        received_time: When the message was received.
    """

    kind: Literal["mail"] = "mail"
    id: str = ""
    subject: Optional[str] = None
    body: Optional[str] = None
    attachment_count: int = Field(default=0, ge=0, alias="attachmentCount")
    recipients: list[Recipient] = Field(default_factory=list)
    sender_email_address: Optional[str] = Field(default=None, alias="senderEmailAddress")
    cc: Optional[str] = None
    importance: Importance = Importance.NORMAL
    body_format: BodyFormat = Field(default=BodyFormat.PLAIN, alias="bodyFormat")
    received_time: Optional[datetime] = Field(default=None, alias="receivedTime")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OtherItem(BaseModel):
    """Any mailbox item that is not a mail message.

    These are kept in the folder model so traversal sees the store as it is,
    but they are never feature-extracted.
    """

    kind: Literal["appointment", "meeting", "contact", "task", "report", "other"] = "other"
    id: str = ""
    subject: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


MailboxItem = Annotated[Union[MailItem, OtherItem], Field(discriminator="kind")]


class FolderNode(BaseModel):
    """
    Mailbox folder with its items and child folders.

    Folders form a tree; no back-edges are expected.

    Attributes:
        name: Folder display name.
        items: Items in store order.
        children: Child folders in store order.
    """

    name: str
    items: list[MailboxItem] = Field(default_factory=list)
    children: list["FolderNode"] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class MailboxSnapshot(BaseModel):
    """Serialized mailbox: the current user and the full root folder tree."""

    current_user_address: str = Field(default="", alias="currentUserAddress")
    root: FolderNode

    model_config = ConfigDict(populate_by_name=True)


class ExtractionResult(BaseModel):
    """
    Outcome of extracting features from one mail item.

    Exactly one of ``record`` / ``error`` is set. The walker logs failures and
    only appends successful records.

    Attributes:
        folder_name: Folder the item was found in.
        item_id: Store item ID.
        subject: Item subject (for logging).
        record: Extracted feature record on success.
        error: Failure description.
    """

    folder_name: str
    item_id: str = ""
    subject: Optional[str] = None
    record: Optional[FeatureRecord] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether extraction produced a record."""
        return self.record is not None


class ScoreData(BaseModel):
    """Scoring request payload: the feature vector and global parameters."""

    feature_vector: dict[str, str] = Field(alias="FeatureVector")
    global_parameters: dict[str, str] = Field(
        default_factory=dict, alias="GlobalParameters"
    )

    model_config = ConfigDict(populate_by_name=True)


class ScoreRequest(BaseModel):
    """
    Request body sent to the scoring service.

    Serialized with ``model_dump(by_alias=True)`` to produce::

        {"Id": "score00001", "Instance": {"FeatureVector": {...}, "GlobalParameters": {}}}
    """

    id: str = Field(default="score00001", alias="Id")
    instance: ScoreData = Field(alias="Instance")

    model_config = ConfigDict(populate_by_name=True)
