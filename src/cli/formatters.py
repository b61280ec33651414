"""Plain-text formatters for CLI output."""

from __future__ import annotations

from typing import Iterable, Optional

import typer

from src.email.models import EmailAddress, Message

SEPARATOR = "-" * 30
BODY_PREVIEW_LENGTH = 100


def format_body_preview(body: Optional[str], limit: int = BODY_PREVIEW_LENGTH) -> str:
    """Truncate a body to ``limit`` characters and escape line breaks."""
    if not body:
        return "(empty)"
    preview = body[:limit]
    return preview.replace("\n", "\\n").replace("\r", "\\r")


def format_message(message: Message) -> list[str]:
    """Return the display lines for one message, separator included."""
    sender = message.sender.address if message.sender else None
    lines = [f"FROM: {sender or ''}"]
    if message.to_recipients is not None:
        lines.append(f"TO: {_join_addresses(message.to_recipients)}")
    if message.cc_recipients is not None:
        lines.append(f"CC: {_join_addresses(message.cc_recipients)}")
    lines.append(f"Subject: {message.subject or ''}")
    lines.append(f"Body: {format_body_preview(message.body)}")
    lines.append(SEPARATOR)
    return lines


def format_summary(folder_name: str, count: int) -> str:
    return f"Found {count} messages in '{folder_name}' folder."


def render_messages(folder_name: str, messages: Iterable[Message]) -> None:
    """Print the summary line followed by every message block, verbatim."""
    messages = list(messages)
    typer.echo(format_summary(folder_name, len(messages)))
    typer.echo(SEPARATOR)
    for message in messages:
        for line in format_message(message):
            typer.echo(line)


def _join_addresses(recipients: Iterable[EmailAddress]) -> str:
    return "; ".join(recipient.address or "" for recipient in recipients)
