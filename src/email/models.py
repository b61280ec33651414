"""Pydantic models for mail data."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


def _get_attr(source: Any, *names: str, default: Any = None) -> Any:
    """Read attribute or dict key from a source object."""
    if source is None:
        return default
    for name in names:
        if isinstance(source, dict) and name in source:
            return source[name]
        if hasattr(source, name):
            return getattr(source, name)
    return default


class EmailAddress(BaseModel):
    """Email address information."""

    address: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_graph(cls, source: Any) -> "EmailAddress":
        """Create an EmailAddress from a Graph recipient or email address payload."""
        email_address = _get_attr(source, "email_address", "emailAddress", default=source)
        return cls(
            address=_get_attr(email_address, "address", default=None),
            name=_get_attr(email_address, "name", default=None),
        )


def _recipients(source: Any) -> Optional[list[EmailAddress]]:
    if source is None:
        return None
    return [EmailAddress.from_graph(recipient) for recipient in source]


class Message(BaseModel):
    """A message as projected by the fetch query.

    Recipient lists keep the order returned by Graph. ``None`` means the
    service sent no list at all.
    """

    sender: Optional[EmailAddress] = None
    to_recipients: Optional[list[EmailAddress]] = None
    cc_recipients: Optional[list[EmailAddress]] = None
    subject: Optional[str] = None
    body: Optional[str] = None

    @classmethod
    def from_graph_message(cls, message: Any) -> "Message":
        """Create a Message model from a Graph message object or dict."""
        sender_source = _get_attr(message, "sender", default=None)
        body = _get_attr(message, "body", default=None)

        return cls(
            sender=EmailAddress.from_graph(sender_source) if sender_source is not None else None,
            to_recipients=_recipients(_get_attr(message, "to_recipients", "toRecipients", default=None)),
            cc_recipients=_recipients(_get_attr(message, "cc_recipients", "ccRecipients", default=None)),
            subject=_get_attr(message, "subject", default=None),
            body=_get_attr(body, "content", default=None),
        )


class MailFolder(BaseModel):
    """Mail folder metadata."""

    id: str
    display_name: str

    @classmethod
    def from_graph_folder(cls, folder: Any) -> "MailFolder":
        """Create a MailFolder model from a Graph folder payload."""
        return cls(
            id=_get_attr(folder, "id", default="") or "",
            display_name=_get_attr(folder, "display_name", "displayName", default="") or "",
        )
