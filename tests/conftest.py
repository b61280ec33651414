"""Pytest configuration and shared fixtures."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories import make_folder, make_recipient


@pytest.fixture
def graph_message() -> SimpleNamespace:
    """Return a mocked Graph message payload."""
    return SimpleNamespace(
        sender=make_recipient("sender@example.com", "Sender"),
        to_recipients=[make_recipient("alice@example.com"), make_recipient("bob@example.com")],
        cc_recipients=[make_recipient("carol@example.com")],
        subject="Status update",
        body=SimpleNamespace(content="Line one\r\nLine two"),
    )


@pytest.fixture
def graph_folders() -> list[SimpleNamespace]:
    """Return a mocked Graph folder listing."""
    return [
        make_folder("id-inbox", "Inbox"),
        make_folder("id-sent", "Sent Items"),
        make_folder("id-junk", "Junk E-mail"),
        make_folder("id-projects", "Projects"),
    ]


@pytest.fixture
def graph_client() -> MagicMock:
    """Return a GraphServiceClient mock with async folder and message requests.

    ``me`` and ``users.by_user_id(...)`` share the same request builders so
    tests can assert against either path.
    """
    client = MagicMock()
    mailbox = MagicMock()
    mailbox.mail_folders.get = AsyncMock(return_value=SimpleNamespace(value=[]))
    mailbox.mail_folders.by_mail_folder_id.return_value.messages.get = AsyncMock(
        return_value=SimpleNamespace(value=[])
    )
    client.me = mailbox
    client.users.by_user_id.return_value = mailbox
    return client
