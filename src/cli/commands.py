"""CLI command for email-reader."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Iterable, Optional

import click
import typer
from azure.core.exceptions import ClientAuthenticationError
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from src.auth import AuthenticationError, GraphAuthenticator
from src.cli.formatters import render_messages
from src.config.settings import Settings, get_settings
from src.email import FolderNotFoundError, MailboxClient, MailboxQueryError
from src.email.models import Message

app = typer.Typer(help="email-reader - print recent messages from an Outlook mail folder", add_completion=False)
console = Console()
logger = logging.getLogger(__name__)

EXIT_INVALID_ARGUMENT = 1
EXIT_AUTH_FAILED = 1
EXIT_FOLDER_NOT_FOUND = 2
EXIT_MISSING_CONFIG = 3
EXIT_REMOTE_ERROR = 4

DEFAULT_MAILBOX = "me"
DEFAULT_FOLDER = "Inbox"
DEFAULT_MESSAGE_COUNT = 10

KNOWN_OPTIONS = frozenset({"--mailbox", "--folder", "--messages", "--verbose"})


@dataclass
class OutputOptions:
    """Track global output flags for the CLI."""

    verbose: bool = False


_OUTPUT = OutputOptions()


def _setup_logging(settings: Settings) -> None:
    settings.setup_logging()
    if _OUTPUT.verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _echo(text: str) -> None:
    typer.echo(text)


def _show_device_code(verification_uri: str, user_code: str, expires_on: datetime) -> None:
    """Display device-code sign-in instructions. Only prints; never prompts."""
    console.print(
        Panel.fit(
            Text(
                f"To sign in, use a web browser to open the page {verification_uri} "
                f"and enter the code {user_code} to authenticate.\n\n"
                f"The code expires at {expires_on:%Y-%m-%d %H:%M}."
            ),
            title="Sign in",
            border_style="blue",
        )
    )


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    add_help_option=False,
)
def read(
    ctx: typer.Context,
    mailbox: Annotated[str, typer.Option("--mailbox", help="Mailbox address, or 'me' for your own")] = DEFAULT_MAILBOX,
    folder: Annotated[str, typer.Option("--folder", help="Mail folder display name")] = DEFAULT_FOLDER,
    messages: Annotated[
        Optional[list[str]], typer.Option("--messages", help="Number of messages to fetch")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Show debug logging")] = False,
) -> None:
    """Print the most recent messages in a mail folder.

    Requires the CLIENT_ID and TENANT_ID environment variables. The first run
    signs in with a device code; later runs reuse the cached sign-in.
    """
    _OUTPUT.verbose = verbose
    settings = get_settings()
    _setup_logging(settings)

    missing = settings.azure.missing_variables()
    if missing:
        _echo(f"{' and '.join(missing)} environment variable(s) not set.")
        raise typer.Exit(code=EXIT_MISSING_CONFIG)

    unknown = _first_unknown_flag(ctx.args) or _first_unknown_flag([mailbox, folder, *(messages or [])])
    if unknown is not None:
        _echo(f"Invalid argument: {unknown}")
        raise typer.Exit(code=EXIT_INVALID_ARGUMENT)

    count = _parse_message_count(messages, DEFAULT_MESSAGE_COUNT)
    logger.debug("Starting read: mailbox=%s folder=%s messages=%s", mailbox, folder, count)
    asyncio.run(_read_async(settings, mailbox, folder, count))


async def _read_async(settings: Settings, mailbox: str, folder: str, count: int) -> None:
    """Authenticate, resolve the folder, fetch and print its messages."""
    settings.ensure_directories()
    authenticator = GraphAuthenticator.from_settings(settings, prompt_callback=_show_device_code)

    try:
        graph_client = await authenticator.authenticate()
        fetched = await _fetch_messages(MailboxClient(graph_client), mailbox, folder, count)
    except AuthenticationError:
        logger.debug("Authentication failed", exc_info=True)
        _echo("Authentication failed.")
        raise typer.Exit(code=EXIT_AUTH_FAILED)
    except FolderNotFoundError as e:
        _echo(str(e))
        raise typer.Exit(code=EXIT_FOLDER_NOT_FOUND)
    except MailboxQueryError as e:
        if isinstance(e.__cause__, ClientAuthenticationError):
            # Token renewal failed on the first Graph request.
            logger.debug("Authentication failed during mailbox query", exc_info=True)
            _echo("Authentication failed.")
            raise typer.Exit(code=EXIT_AUTH_FAILED)
        _echo(f"Mailbox query failed: {e}")
        raise typer.Exit(code=EXIT_REMOTE_ERROR)
    finally:
        await authenticator.close()

    render_messages(folder, fetched)


async def _fetch_messages(client: MailboxClient, mailbox: str, folder: str, count: int) -> list[Message]:
    folder_id = await client.resolve_folder_id(mailbox, folder)
    return await client.list_messages(mailbox, folder_id, count)


def _first_unknown_flag(args: Iterable[str]) -> Optional[str]:
    for arg in args:
        if arg.startswith("--") and arg not in KNOWN_OPTIONS:
            return arg
    return None


def _parse_message_count(values: Optional[list[str]], default: int) -> int:
    """Return the last integer given to --messages; non-integers are ignored."""
    count = default
    for value in values or []:
        try:
            count = int(value)
        except ValueError:
            logger.debug("Ignoring non-integer --messages value %r", value)
    return count


def _describe_usage_error(exc: click.ClickException) -> str:
    option_name = getattr(exc, "option_name", None)
    return option_name or exc.format_message()


def main() -> None:
    """Main entry point for CLI."""
    command = typer.main.get_command(app)
    try:
        exit_code = command.main(prog_name="email-reader", standalone_mode=False)
    except click.ClickException as exc:
        _echo(f"Invalid argument: {_describe_usage_error(exc)}")
        sys.exit(EXIT_INVALID_ARGUMENT)
    except click.exceptions.Abort:
        _echo("Aborted.")
        sys.exit(EXIT_INVALID_ARGUMENT)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
