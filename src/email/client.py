"""Microsoft Graph mailbox client wrapper."""

from __future__ import annotations

import logging
from typing import Any

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.users.item.mail_folders.item.messages.messages_request_builder import MessagesRequestBuilder
from msgraph.generated.users.item.mail_folders.mail_folders_request_builder import MailFoldersRequestBuilder

from src.email.folders import match_folder, well_known_name
from src.email.models import MailFolder, Message

logger = logging.getLogger(__name__)

SELF_MAILBOX = "me"
FOLDER_PAGE_SIZE = 100
FOLDER_FIELDS = ["id", "displayName"]
MESSAGE_FIELDS = ["sender", "toRecipients", "ccRecipients", "subject", "body"]
MESSAGE_ORDER = ["receivedDateTime desc"]


class FolderNotFoundError(Exception):
    """Raised when no folder in the mailbox matches the requested name."""

    def __init__(self, folder_name: str):
        self.folder_name = folder_name
        super().__init__(f"Folder '{folder_name}' not found.")


class MailboxQueryError(Exception):
    """Raised when a Graph request for folders or messages fails."""

    pass


class MailboxClient:
    """Read-only wrapper around GraphServiceClient for one mailbox query.

    ``mailbox`` is either ``"me"`` for the signed-in user or a user id /
    address for a mailbox the user has been granted access to.
    """

    def __init__(self, graph_client: GraphServiceClient):
        self._graph_client = graph_client

    async def list_folders(self, mailbox: str = SELF_MAILBOX, top: int = FOLDER_PAGE_SIZE) -> list[MailFolder]:
        """List up to ``top`` mail folders with only id and display name."""
        query_params = MailFoldersRequestBuilder.MailFoldersRequestBuilderGetQueryParameters(
            select=FOLDER_FIELDS,
            top=top,
        )
        request_configuration = RequestConfiguration(query_parameters=query_params)

        try:
            response = await self._mailbox(mailbox).mail_folders.get(request_configuration=request_configuration)
        except Exception as exc:
            logger.error("Listing folders for mailbox %s failed: %s", mailbox, exc)
            raise MailboxQueryError(f"Failed to list folders: {exc}") from exc

        folders = [MailFolder.from_graph_folder(folder) for folder in self._extract_collection(response)]
        logger.debug("Mailbox %s returned %d folders", mailbox, len(folders))
        return folders

    async def resolve_folder_id(self, mailbox: str, folder_name: str) -> str:
        """Return the id of the folder whose display name matches ``folder_name``.

        Raises:
            FolderNotFoundError: If no folder matches
            MailboxQueryError: If the folder listing fails
        """
        logger.debug("Resolving folder %r (well-known name: %s)", folder_name, well_known_name(folder_name))
        folders = await self.list_folders(mailbox)

        folder = match_folder(folders, folder_name)
        if folder is None or not folder.id:
            raise FolderNotFoundError(folder_name)

        logger.debug("Resolved folder %r to %s", folder_name, folder.id)
        return folder.id

    async def list_messages(self, mailbox: str, folder_id: str, count: int) -> list[Message]:
        """Fetch up to ``count`` messages from a folder, newest first.

        A single page is requested; if the service returns fewer messages
        than asked for, that is what the caller gets.

        Raises:
            MailboxQueryError: If the message query fails
        """
        if count <= 0:
            return []

        query_params = MessagesRequestBuilder.MessagesRequestBuilderGetQueryParameters(
            select=MESSAGE_FIELDS,
            orderby=MESSAGE_ORDER,
            top=count,
        )
        request_configuration = RequestConfiguration(query_parameters=query_params)
        messages_request = self._mailbox(mailbox).mail_folders.by_mail_folder_id(folder_id).messages

        try:
            response = await messages_request.get(request_configuration=request_configuration)
        except Exception as exc:
            logger.error("Listing messages in folder %s failed: %s", folder_id, exc)
            raise MailboxQueryError(f"Failed to list messages: {exc}") from exc

        messages = [Message.from_graph_message(message) for message in self._extract_collection(response)]
        return messages[:count]

    def _mailbox(self, mailbox: str) -> Any:
        if mailbox == SELF_MAILBOX:
            return self._graph_client.me
        return self._graph_client.users.by_user_id(mailbox)

    @staticmethod
    def _extract_collection(response: Any) -> list[Any]:
        if response is None:
            return []
        if isinstance(response, list):
            return response
        value = getattr(response, "value", None)
        if value is None:
            return []
        return list(value)
