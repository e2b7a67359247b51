"""Per-message feature rules.

Objective:
    Map one :class:`src.outlook_features.models.MailItem` to a
    :data:`src.outlook_features.models.FeatureRecord`: an ordered mapping of
    feature name to value that becomes one row of the output table.

Responsibilities:
    - Text classifiers over the subject (time mentions, reply/forward
      prefixes, character and digit counts).
    - Address-derived features (sender domain, sent-directly-to-me).
    - Time-of-day features from the received timestamp.
    - A non-raising wrapper (:func:`extract_record`) used by the folder walker.

High-level call tree:
    - :func:`extract_record` -> returns :class:`ExtractionResult`
        - :func:`extract_features`
            - :func:`joined_recipients`
            - :func:`may_contain_a_time`, :func:`is_re_or_fw`
            - :func:`word_count`, :func:`email_domain`
            - :func:`special_character_count`, :func:`number_count`

Operational notes:
    - Blank or whitespace-only text yields 0 for counts and False for regex
      flags; the check runs before any regex is evaluated.
    - Every record carries the same keys in the same order (see
      :data:`FEATURE_COLUMNS`); the table encoder reads the header from the
      first record only.
"""

import re
from typing import Optional

from .models import ExtractionResult, FeatureRecord, MailItem

FEATURE_COLUMNS = (
    "TestFolder",
    "HasAttachments",
    "SentDirect",
    "MayContainATime",
    "IsREorFW",
    "ReceivedDayOfWeek",
    "ReceivedHour",
    "SubjectWordCount",
    "BodyWordCount",
    "SenderDomain",
    "HasCC",
    "Importance",
    "BodyFormat",
    "SpecialCharacterCount",
    "NumberCount",
    "Received",
    "Subject",
    "FolderName",
)

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_TIME_24H_RE = re.compile(r"\b(?:0?[0-9]|1[0-9]|2[0-3]):[0-5][0-9]\b")
_TIME_12H_RE = re.compile(r"\b(?:0?[1-9]|1[012])(?::[0-5]\d)? ?[ap]m\b", re.IGNORECASE)
_RE_OR_FW_RE = re.compile(r"\b(?:re|fd|fwd)\b:", re.IGNORECASE)
_WORD_RE = re.compile(r"\S+")
_SPECIAL_CHARACTER_RE = re.compile(r"[^0-9A-Za-z_ :-]")
_DIGIT_RE = re.compile(r"[0-9]")


class FeatureExtractionError(ValueError):
    """Raised when a message lacks a property needed to derive its features."""


def _is_blank(text: Optional[str]) -> bool:
    return not text or text.isspace()


def word_count(text: Optional[str]) -> int:
    """Count maximal runs of non-whitespace characters."""
    if _is_blank(text):
        return 0
    return len(_WORD_RE.findall(text))


def may_contain_a_time(subject: Optional[str]) -> bool:
    """Check whether a subject mentions a clock time.

    Matches 24-hour times (``23:59``, ``7:05``) and 12-hour times with an
    am/pm suffix (``3pm``, ``11:30 AM``).
    """
    if _is_blank(subject):
        return False
    return bool(_TIME_24H_RE.search(subject) or _TIME_12H_RE.search(subject))


def is_re_or_fw(subject: Optional[str]) -> bool:
    """Check whether a subject carries a reply or forward prefix."""
    if _is_blank(subject):
        return False
    return bool(_RE_OR_FW_RE.search(subject))


def email_domain(address: Optional[str]) -> str:
    """Extract the lowercased domain of an address.

    Everything after the first ``@`` is returned, so malformed addresses with
    several ``@`` keep the remainder intact.

    Args:
        address: Email address, possibly ``None``.

    Returns:
        str: Domain, or an empty string when there is no ``@``.
    """
    address = address or ""
    index = address.find("@")
    if index == -1:
        return ""
    return address[index + 1 :].lower()


def special_character_count(subject: Optional[str]) -> int:
    """Count subject characters outside ``[0-9A-Za-z_ :-]``."""
    if _is_blank(subject):
        return 0
    return len(_SPECIAL_CHARACTER_RE.findall(subject))


def number_count(subject: Optional[str]) -> int:
    """Count digit characters in the subject."""
    if _is_blank(subject):
        return 0
    return len(_DIGIT_RE.findall(subject))


def joined_recipients(message: MailItem) -> str:
    """Join the SMTP address of every recipient with commas.

    Recipients keep their store order (To, then Cc, then Bcc).

    Args:
        message: Mail item.

    Returns:
        str: Comma-joined addresses (empty string when there are none).

    Raises:
        FeatureExtractionError: If a recipient has no SMTP address.
    """
    addresses = []
    for recipient in message.recipients:
        if recipient.smtp_address is None:
            raise FeatureExtractionError(
                f"Recipient {recipient.name!r} has no SMTP address"
            )
        addresses.append(recipient.smtp_address)
    return ",".join(addresses)


def extract_features(
    message: MailItem,
    current_user_address: str,
    test_folder_name: str,
    folder_name: str,
) -> FeatureRecord:
    """Derive the feature record for one message.

    ``SentDirect`` compares the whole comma-joined recipient list against the
    current user's address (case-insensitive). A message sent to the user and
    someone else is therefore not "sent direct".

    Args:
        message: Mail item to describe.
        current_user_address: SMTP address of the mailbox owner.
        test_folder_name: Folder whose messages are labeled as test data.
        folder_name: Name of the folder the message was found in.

    Returns:
        FeatureRecord: Ordered mapping with the keys of :data:`FEATURE_COLUMNS`.

    Raises:
        FeatureExtractionError: If the received time or a recipient address is
            missing.
    """
    received = message.received_time
    if received is None:
        raise FeatureExtractionError("Message has no received time")

    subject = message.subject
    recipients = joined_recipients(message)
    sent_direct = recipients.lower() == (current_user_address or "").lower()

    record: FeatureRecord = {}
    record["TestFolder"] = folder_name == test_folder_name
    record["HasAttachments"] = message.attachment_count > 0
    record["SentDirect"] = sent_direct
    record["MayContainATime"] = may_contain_a_time(subject)
    record["IsREorFW"] = is_re_or_fw(subject)
    record["ReceivedDayOfWeek"] = DAY_NAMES[received.weekday()]
    record["ReceivedHour"] = received.hour
    record["SubjectWordCount"] = word_count(subject)
    record["BodyWordCount"] = word_count(message.body)
    record["SenderDomain"] = email_domain(message.sender_email_address)
    record["HasCC"] = not _is_blank(message.cc)
    record["Importance"] = int(message.importance)
    record["BodyFormat"] = int(message.body_format)
    record["SpecialCharacterCount"] = special_character_count(subject)
    record["NumberCount"] = number_count(subject)
    # Raw values, kept for diagnostics and prediction filtering
    record["Received"] = received
    record["Subject"] = subject
    record["FolderName"] = folder_name
    return record


def extract_record(
    message: MailItem,
    current_user_address: str,
    test_folder_name: str,
    folder_name: str,
) -> ExtractionResult:
    """Extract features without raising.

    Any error is captured inside :class:`ExtractionResult` so a traversal can
    continue with the next item.

    Args:
        message: Mail item to describe.
        current_user_address: SMTP address of the mailbox owner.
        test_folder_name: Folder whose messages are labeled as test data.
        folder_name: Name of the folder the message was found in.

    Returns:
        ExtractionResult: Record on success, error message otherwise.
    """
    try:
        record = extract_features(
            message, current_user_address, test_folder_name, folder_name
        )
    except Exception as e:
        return ExtractionResult(
            folder_name=folder_name,
            item_id=message.id,
            subject=message.subject,
            error=f"{type(e).__name__}: {e}",
        )

    return ExtractionResult(
        folder_name=folder_name,
        item_id=message.id,
        subject=message.subject,
        record=record,
    )
