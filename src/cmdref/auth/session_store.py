"""Persistent login session.

Stores the :class:`~cmdref.models.Session` in ``session.json`` under the
config directory (``~/.config/cmdref/`` on XDG platforms, ``~/.cmdref/``
elsewhere). Writes go to a temporary file in the same directory, created
with ``0o600`` permissions, fsynced, and renamed over the canonical file
with :func:`os.replace`. Readers therefore see either the previous session
or the new one, and a crash mid-write never leaves a truncated file behind.

A missing file means "not logged in"; it is never represented by an
empty :class:`~cmdref.models.Session`.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from cmdref.config import get_session_path
from cmdref.exceptions import InvalidUsageError, SessionError
from cmdref.models import Session


class SessionStore:
    """Read/write the single login session.

    Args:
        path: Session file location. Defaults to
            :func:`cmdref.config.get_session_path`.

    Example::

        store = SessionStore()
        store.save(Session(token="t1", email="a@b.com", name="Ada"))
        assert store.load().token == "t1"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else get_session_path()

    @property
    def path(self) -> Path:
        """The filesystem path to the session file."""
        return self._path

    def save(self, session: Session) -> Session:
        """Persist *session* atomically with ``0o600`` permissions.

        ``created_at`` is filled with the current UTC time when unset.

        Returns:
            The session exactly as written.

        Raises:
            InvalidUsageError: If the token is empty. The existing file is
                left untouched.
            SessionError: If the directory or file cannot be written.
        """
        if not session.token:
            raise InvalidUsageError("Refusing to save a session with an empty token")

        if session.created_at is None:
            session = session.model_copy(
                update={"created_at": datetime.now(timezone.utc).replace(microsecond=0)}
            )

        data = session.model_dump(mode="json", by_alias=True, exclude_none=True)
        text = json.dumps(data, indent=2) + "\n"

        fd = None
        tmp_path: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = tempfile.NamedTemporaryFile(
                mode="w",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            )
            tmp_path = fd.name
            # Restrict permissions before any secret reaches the disk
            os.chmod(tmp_path, 0o600)
            fd.write(text)
            fd.flush()
            os.fsync(fd.fileno())
            fd.close()
            fd = None
            os.replace(tmp_path, self._path)
        except BaseException as exc:
            if fd is not None:
                fd.close()
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            if isinstance(exc, OSError):
                raise SessionError(f"Could not write session to {self._path}: {exc}") from exc
            raise
        return session

    def load(self) -> Optional[Session]:
        """Load the stored session.

        Returns:
            The :class:`~cmdref.models.Session`, or ``None`` when the file
            does not exist or holds an empty token.

        Raises:
            SessionError: If the file cannot be read or is not a valid
                session document.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise SessionError(f"Malformed session file {self._path}: {exc}") from exc
        except OSError as exc:
            raise SessionError(f"Could not read session from {self._path}: {exc}") from exc

        try:
            session = Session.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise SessionError(f"Malformed session file {self._path}: {exc}") from exc

        if not session.token:
            return None
        return session

    def clear(self) -> None:
        """Delete the session file. A missing file is not an error."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise SessionError(f"Could not remove session {self._path}: {exc}") from exc
