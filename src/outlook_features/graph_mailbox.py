"""Microsoft Graph mailbox adapter.

Objective:
    Read a live Outlook mailbox through Microsoft Graph and expose it as the
    :class:`src.outlook_features.mailbox.Mailbox` capability: the current
    user's address and a fully loaded :class:`FolderNode` tree.

Responsibilities:
    - Issue authenticated HTTP requests to Graph (via :class:`requests`).
    - Load a folder, its messages (following ``@odata.nextLink`` pages) and,
      recursively, its child folders.
    - Convert Graph message JSON into :class:`MailItem` / :class:`OtherItem`.

High-level call tree:
    - Public API:
        - :meth:`GraphMailbox.current_user_address`
        - :meth:`GraphMailbox.root_folder` -> returns :class:`FolderNode`
    - Internal helpers:
        - :meth:`GraphMailbox._make_request` (auth + error handling)
        - :meth:`GraphMailbox._build_folder` (recursive traversal)
            - :meth:`GraphMailbox._get_items`
                - :func:`to_mailbox_item`
            - :meth:`GraphMailbox._get_child_folders`

Graph endpoints used:
    - ``GET /me``
    - ``GET /me/mailFolders/{id}``
    - ``GET /me/mailFolders/{id}/messages``
    - ``GET /me/mailFolders/{id}/childFolders``

Error handling:
    - HTTP errors are logged and raised from :meth:`_make_request`.
    - A child folder that cannot be listed is logged and left out; its
      siblings are still loaded.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Union
from urllib.parse import quote

import requests
from pydantic import TypeAdapter

from .models import (
    BodyFormat,
    FolderNode,
    Importance,
    MailItem,
    OtherItem,
    Recipient,
)
from .sanitizer import body_to_text

logger = logging.getLogger(__name__)

GRAPH_MESSAGE_TYPE = "#microsoft.graph.message"

_IMPORTANCE_CODES = {
    "low": Importance.LOW,
    "normal": Importance.NORMAL,
    "high": Importance.HIGH,
}

_BODY_FORMATS = {
    "text": BodyFormat.PLAIN,
    "html": BodyFormat.HTML,
}

_MESSAGE_FIELDS = (
    "id,subject,body,sender,toRecipients,ccRecipients,bccRecipients,"
    "importance,receivedDateTime"
)

_DATETIME = TypeAdapter(datetime)


class AuthProvider(Protocol):
    """Anything that can produce Graph request headers."""

    def get_auth_headers(self) -> dict[str, str]: ...


class StaticTokenAuth:
    """Auth provider for an access token issued outside this application."""

    def __init__(self, access_token: str) -> None:
        self.access_token = access_token

    def get_auth_headers(self) -> dict[str, str]:
        """
        Get HTTP headers with authorization for Graph API requests.

        Returns:
            dict[str, str]: Headers dictionary with Bearer token.
        """
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }


def _address(entry: Optional[dict]) -> Optional[str]:
    if not entry:
        return None
    return (entry.get("emailAddress") or {}).get("address")


def _recipients(item: dict) -> list[Recipient]:
    recipients = []
    for field in ("toRecipients", "ccRecipients", "bccRecipients"):
        for entry in item.get(field) or []:
            email_address = entry.get("emailAddress") or {}
            recipients.append(
                Recipient(
                    name=email_address.get("name") or "",
                    smtp_address=email_address.get("address"),
                )
            )
    return recipients


def _cc_display(item: dict) -> str:
    names = []
    for entry in item.get("ccRecipients") or []:
        email_address = entry.get("emailAddress") or {}
        names.append(email_address.get("name") or email_address.get("address") or "")
    return "; ".join(name for name in names if name)


def _local_time(value: Optional[str]) -> Optional[datetime]:
    """Parse a Graph timestamp and convert it to the local timezone.

    Graph reports ``receivedDateTime`` in UTC; Outlook clients show the
    received time in local time, and the hour and weekday features are taken
    from that local view. A timestamp without an offset is read as UTC.

    Raises:
        pydantic.ValidationError: If the value is not a timestamp.
    """
    if not value:
        return None
    received = _DATETIME.validate_python(value)
    if received.tzinfo is None:
        received = received.replace(tzinfo=timezone.utc)
    return received.astimezone()


def to_mailbox_item(item: dict) -> Union[MailItem, OtherItem]:
    """Convert one Graph message resource into a mailbox item.

    Graph returns derived message types (meeting requests, responses and
    cancellations) from the same ``messages`` endpoint. Those carry an
    ``@odata.type`` other than ``#microsoft.graph.message`` and become
    :class:`OtherItem`.

    Args:
        item: Message JSON as returned by Graph.

    Returns:
        Union[MailItem, OtherItem]: Converted item.

    Raises:
        pydantic.ValidationError: If a field has an unexpected shape.
    """
    odata_type = item.get("@odata.type", GRAPH_MESSAGE_TYPE)
    if odata_type != GRAPH_MESSAGE_TYPE:
        kind = "meeting" if "eventMessage" in odata_type else "other"
        return OtherItem(kind=kind, id=item.get("id", ""), subject=item.get("subject"))

    body = item.get("body") or {}
    content_type = body.get("contentType") or "text"

    return MailItem(
        id=item.get("id", ""),
        subject=item.get("subject"),
        body=body_to_text(body.get("content") or "", content_type),
        attachment_count=len(item.get("attachments") or []),
        recipients=_recipients(item),
        sender_email_address=_address(item.get("sender")),
        cc=_cc_display(item),
        importance=_IMPORTANCE_CODES.get(
            (item.get("importance") or "normal").lower(), Importance.NORMAL
        ),
        body_format=_BODY_FORMATS.get(content_type.lower(), BodyFormat.UNSPECIFIED),
        received_time=_local_time(item.get("receivedDateTime")),
    )


class GraphMailbox:
    """
    Mailbox read from Microsoft Graph.

    The whole folder tree under the root folder is loaded when
    :meth:`root_folder` is called; nothing is cached between calls, so each
    call reads the live mailbox state.

    Attributes:
        auth: Provider of Graph auth headers.
        root_folder_id: Folder id or well-known name to start from.
        page_size: Messages requested per page.
    """

    GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

    def __init__(
        self,
        auth: AuthProvider,
        root_folder: str = "inbox",
        page_size: int = 50,
    ) -> None:
        """
        Initialize the Graph mailbox.

        Args:
            auth: Provider of Graph auth headers.
            root_folder: Folder id or well-known name ("inbox") to start from.
            page_size: Messages requested per page.
        """
        self.auth = auth
        self.root_folder_id = root_folder
        self.page_size = page_size

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> dict:
        """Make an authenticated request to Microsoft Graph.

        ``endpoint`` is either a path relative to :attr:`GRAPH_BASE_URL` or an
        absolute ``@odata.nextLink`` URL.

        Args:
            method: HTTP method.
            endpoint: API endpoint path or absolute URL.
            params: Query parameters.

        Returns:
            dict: Response JSON data.

        Raises:
            requests.HTTPError: If request fails.
        """
        if endpoint.startswith("https://"):
            url = endpoint
        else:
            url = f"{self.GRAPH_BASE_URL}{endpoint}"
        headers = self.auth.get_auth_headers()

        response = requests.request(
            method=method,
            url=url,
            headers=headers,
            params=params,
            timeout=30,
        )

        if not response.ok:
            logger.error(
                f"Graph API error: {response.status_code} - {response.text}"
            )
            response.raise_for_status()

        if response.status_code == 204:
            return {}

        return response.json()

    def current_user_address(self) -> str:
        """Get the signed-in user's primary SMTP address.

        Returns:
            str: ``mail``, or ``userPrincipalName`` when no mailbox address is
            set.
        """
        response = self._make_request(
            "GET", "/me", params={"$select": "mail,userPrincipalName"}
        )
        return response.get("mail") or response.get("userPrincipalName") or ""

    def root_folder(self) -> FolderNode:
        """Load the root folder and everything beneath it.

        Returns:
            FolderNode: Fully populated folder tree.
        """
        safe_folder_id = quote(self.root_folder_id, safe="")
        folder = self._make_request(
            "GET",
            f"/me/mailFolders/{safe_folder_id}",
            params={"$select": "id,displayName,childFolderCount"},
        )
        return self._build_folder(folder)

    def _build_folder(self, folder: dict) -> FolderNode:
        """Build a folder node, recursing into child folders.

        Args:
            folder: Folder JSON with ``id``, ``displayName`` and
                ``childFolderCount``.

        Returns:
            FolderNode: Folder with items and children loaded.
        """
        name = folder.get("displayName", "")
        logger.debug(f"Loading folder {name}")

        children = []
        if folder.get("childFolderCount", 0) > 0:
            for child in self._get_child_folders(folder["id"]):
                children.append(self._build_folder(child))

        return FolderNode(
            name=name,
            items=self._get_items(folder["id"]),
            children=children,
        )

    def _get_child_folders(self, parent_folder_id: str) -> list[dict]:
        """Get child folders of a parent folder.

        Args:
            parent_folder_id: Parent folder ID.

        Returns:
            list[dict]: Child folder JSON objects (empty on failure).
        """
        safe_folder_id = quote(parent_folder_id, safe="")
        endpoint = f"/me/mailFolders/{safe_folder_id}/childFolders"
        params = {
            "$top": 100,
            "$select": "id,displayName,childFolderCount",
        }

        folders: list[dict] = []
        try:
            while endpoint:
                response = self._make_request("GET", endpoint, params=params)
                folders.extend(response.get("value", []))
                endpoint = response.get("@odata.nextLink")
                params = None
        except requests.HTTPError as e:
            logger.warning(f"Failed to get child folders of {parent_folder_id}: {e}")

        return folders

    def _get_items(self, folder_id: str) -> list[Union[MailItem, OtherItem]]:
        """Fetch every item of a folder, following pagination.

        Items that fail to convert are logged and left out.

        Args:
            folder_id: Folder ID.

        Returns:
            list[Union[MailItem, OtherItem]]: Items in Graph order.
        """
        safe_folder_id = quote(folder_id, safe="")
        endpoint: Optional[str] = f"/me/mailFolders/{safe_folder_id}/messages"
        params: Optional[dict[str, Any]] = {
            "$top": self.page_size,
            "$select": _MESSAGE_FIELDS,
            "$expand": "attachments($select=id)",
            "$orderby": "receivedDateTime desc",
        }

        items: list[Union[MailItem, OtherItem]] = []
        while endpoint:
            response = self._make_request("GET", endpoint, params=params)
            for raw in response.get("value", []):
                try:
                    items.append(to_mailbox_item(raw))
                except Exception as e:
                    logger.warning(f"Failed to parse message {raw.get('id')}: {e}")
                    continue

            # nextLink already carries the query string
            endpoint = response.get("@odata.nextLink")
            params = None

        logger.debug(f"Fetched {len(items)} items from folder {folder_id}")
        return items
