"""Folder name matching for mailbox folder lookups."""

from __future__ import annotations

from typing import Iterable, Optional

from src.email.models import MailFolder

# Display name (lowercased) -> Graph well-known folder name
WELL_KNOWN_FOLDERS = {
    "inbox": "inbox",
    "sent items": "sentitems",
    "drafts": "drafts",
    "deleted items": "deleteditems",
    "outbox": "outbox",
    "junk email": "junkemail",
    "archive": "archive",
}


def well_known_name(folder_name: str) -> Optional[str]:
    """Return the Graph well-known name for a standard folder display name."""
    return WELL_KNOWN_FOLDERS.get(folder_name.lower())


def _compact(display_name: str) -> str:
    return display_name.lower().replace(" ", "").replace("-", "")


def match_folder(folders: Iterable[MailFolder], folder_name: str) -> Optional[MailFolder]:
    """Pick the folder a user-supplied name refers to.

    The first folder whose display name equals ``folder_name`` ignoring case
    wins. Failing that, a standard folder name such as "Junk Email" also
    matches a display name that spells the well-known name differently
    ("Junk E-mail"). Duplicates resolve to the first one in ``folders``.
    """
    folders = list(folders)
    wanted = folder_name.lower()

    for folder in folders:
        if folder.display_name and folder.display_name.lower() == wanted:
            return folder

    well_known = well_known_name(folder_name)
    if well_known is None:
        return None

    for folder in folders:
        if folder.display_name and _compact(folder.display_name) == well_known:
            return folder

    return None
