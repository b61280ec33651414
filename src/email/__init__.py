"""Mail folder and message retrieval module."""

from src.email.client import FolderNotFoundError, MailboxClient, MailboxQueryError
from src.email.folders import WELL_KNOWN_FOLDERS, match_folder, well_known_name
from src.email.models import EmailAddress, MailFolder, Message

__all__ = [
    "MailboxClient",
    "FolderNotFoundError",
    "MailboxQueryError",
    "WELL_KNOWN_FOLDERS",
    "match_folder",
    "well_known_name",
    "EmailAddress",
    "MailFolder",
    "Message",
]
