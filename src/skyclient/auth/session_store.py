"""Persistent session record shared with other Skyclient tools.

The record lives at ``~/.skyclient/token`` (see
:attr:`~skyclient.models.Settings.session_path`) as a single JSON object::

    {
      "token": "...",
      "user_id": "...",
      "workspace_id": "...",
      "jwt_token": "...",
      "email": "..."
    }

Every login overwrites the whole file; nothing is merged with prior content.
Writes go through :func:`~skyclient.config.atomic_write` with ``0o600``
permissions so that the token is never world-readable and a failed write
never leaves partial JSON behind.

See Also:
    :class:`~skyclient.auth.login.LoginMachine` -- the only writer.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from skyclient.config import atomic_write
from skyclient.exceptions import SessionWriteError
from skyclient.models import SessionRecord, Settings

logger = logging.getLogger(__name__)


class SessionStore:
    """Read/write the session record at a fixed path.

    Args:
        path: Location of the session file.

    Example::

        store = SessionStore(settings.session_path)
        store.save(SessionRecord(token="tok", user_id="u1", email="a@b.com"))
        assert store.load().token == "tok"
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionStore:
        """Build a store for the configured session path."""
        return cls(settings.session_path)

    @property
    def path(self) -> Path:
        """The filesystem path to the session file."""
        return self._path

    @staticmethod
    def serialize(record: SessionRecord) -> str:
        """Render *record* exactly as it is written to disk."""
        return json.dumps(record.model_dump(mode="json"), indent=2) + "\n"

    def save(self, record: SessionRecord) -> None:
        """Persist a session record atomically with ``0o600`` permissions.

        Args:
            record: The record to write. Replaces any existing file.

        Raises:
            SessionWriteError: If the file cannot be written. The previous
                file, if any, is left untouched.
        """
        try:
            atomic_write(self._path, self.serialize(record), mode=0o600)
        except OSError as exc:
            raise SessionWriteError(
                f"Failed to save session information to {self._path}: {exc}"
            ) from exc
        logger.debug("Session record written to %s", self._path)

    def load(self) -> Optional[SessionRecord]:
        """Load the stored session record from disk.

        Returns:
            The deserialised :class:`~skyclient.models.SessionRecord`, or
            ``None`` if the file does not exist or cannot be parsed.
        """
        if not self._path.is_file():
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
            return SessionRecord.model_validate(data)
        except (json.JSONDecodeError, ValueError, OSError):
            return None

    def exists(self) -> bool:
        """Whether a session file is present (it may still be unreadable)."""
        return self._path.is_file()

    def clear(self) -> None:
        """Delete the session file if it exists.

        This is a no-op when the file has already been removed.
        """
        if self._path.is_file():
            self._path.unlink()
