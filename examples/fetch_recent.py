"""List the folders of a mailbox and show the last 5 messages of the inbox."""

import asyncio

from src.auth import GraphAuthenticator
from src.cli.formatters import render_messages
from src.config.settings import get_settings
from src.email import MailboxClient


async def main() -> None:
    """Authenticate, print folder names and recent inbox messages."""
    settings = get_settings()
    settings.ensure_directories()

    authenticator = GraphAuthenticator.from_settings(settings)
    graph_client = await authenticator.authenticate()

    try:
        client = MailboxClient(graph_client)
        for folder in await client.list_folders("me"):
            print(f"{folder.display_name} ({folder.id})")

        folder_id = await client.resolve_folder_id("me", "Inbox")
        messages = await client.list_messages("me", folder_id, 5)
    finally:
        await authenticator.close()

    render_messages("Inbox", messages)


if __name__ == "__main__":
    asyncio.run(main())
