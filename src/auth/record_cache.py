"""On-disk persistence of the device-code authentication record."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from azure.identity import AuthenticationRecord

logger = logging.getLogger(__name__)


class AuthRecordCacheError(Exception):
    """Raised when the authentication record cannot be read or written."""

    pass


class AuthRecordCache:
    """Stores the serialized AuthenticationRecord between runs.

    The record holds no secrets: it identifies the signed-in account so that
    azure-identity can find the matching refresh token in its own persistent
    cache and renew silently instead of starting a new device-code flow.

    Attributes:
        record_file: Path to the record file
    """

    def __init__(self, record_file: str | Path):
        """Initialize the AuthRecordCache.

        Args:
            record_file: Path to the record file (created on first save)
        """
        self.record_file = Path(record_file).expanduser()
        logger.debug(f"Initialized AuthRecordCache with file: {self.record_file}")

    def exists(self) -> bool:
        """Return True if a record file is present."""
        return self.record_file.exists()

    async def load(self) -> Optional[AuthenticationRecord]:
        """Load the cached record.

        Returns:
            The deserialized record, or None if no record file exists

        Raises:
            AuthRecordCacheError: If the file exists but cannot be parsed
        """
        if not self.exists():
            logger.debug("Authentication record file does not exist")
            return None

        try:
            data = await asyncio.to_thread(self._read_record_file)
            record = AuthenticationRecord.deserialize(data)
        except Exception as e:
            logger.debug("Failed to load authentication record: %s", e)
            raise AuthRecordCacheError(f"Failed to load authentication record: {e}") from e

        logger.debug("Authentication record loaded for %s", record.username)
        return record

    async def save(self, record: AuthenticationRecord) -> None:
        """Persist a record, replacing any previous one.

        Args:
            record: The record returned by a completed device-code sign-in

        Raises:
            AuthRecordCacheError: If writing fails
        """
        try:
            await asyncio.to_thread(self._write_record_file, record.serialize())
            logger.info(f"Authentication record cached to {self.record_file}")
        except Exception as e:
            logger.error(f"Failed to save authentication record: {e}")
            raise AuthRecordCacheError(f"Failed to save authentication record: {e}") from e

    async def clear(self) -> None:
        """Remove the record file, forcing a new sign-in on the next run."""
        try:
            if self.exists():
                await asyncio.to_thread(self.record_file.unlink)
                logger.info("Authentication record cleared")
            else:
                logger.debug("No authentication record to clear")

        except Exception as e:
            logger.error(f"Failed to clear authentication record: {e}")
            raise AuthRecordCacheError(f"Failed to clear authentication record: {e}") from e

    def _read_record_file(self) -> str:
        with open(self.record_file, "r", encoding="utf-8") as f:
            return f.read()

    def _write_record_file(self, data: str) -> None:
        """Write via a temp file and rename so a crash never leaves a partial record."""
        directory = self.record_file.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.record_file.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            # Owner read/write only
            tmp_path.chmod(0o600)
            os.replace(tmp_path, self.record_file)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
