"""
Auth token storage with a fixed expiry.

The token is the one piece of state shared between the session (writer)
and the HTTP facade (reader on every request).
"""
import json
import os
from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Optional

from storefront.config import DEFAULT_TOKEN_TTL_DAYS
from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)


class TokenStore:
    """
    Base token store.

    Subclasses implement ``_read``/``_write``/``_delete`` over a raw
    ``{"token": ..., "expires_at": ...}`` record; expiry is enforced here.
    """

    def __init__(self, ttl_days: int = DEFAULT_TOKEN_TTL_DAYS):
        self.ttl = timedelta(days=ttl_days)

    def get(self) -> Optional[str]:
        """Return the stored token, or None if absent or expired."""
        record = self._read()
        if not record:
            return None

        token = record.get("token")
        expires_at = record.get("expires_at")
        if not token or not expires_at:
            self._delete()
            return None

        try:
            expires = datetime.fromisoformat(expires_at)
        except ValueError:
            logger.warning("Discarding token with unreadable expiry")
            self._delete()
            return None
        if expires.tzinfo is None:
            # Hand-written records carry no offset; read them as UTC
            expires = expires.replace(tzinfo=timezone.utc)

        if datetime.now(timezone.utc) > expires:
            logger.info("Stored token expired")
            self._delete()
            return None

        return token

    def set(self, token: str) -> None:
        """Store ``token`` with a fresh expiry."""
        expires_at = datetime.now(timezone.utc) + self.ttl
        self._write({"token": token, "expires_at": expires_at.isoformat()})
        logger.debug(f"Token stored: {sanitize_id_for_logging(token)}...")

    def clear(self) -> None:
        self._delete()

    def _read(self) -> Optional[dict]:
        raise NotImplementedError

    def _write(self, record: dict) -> None:
        raise NotImplementedError

    def _delete(self) -> None:
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    """Token store that lives only as long as the process."""

    def __init__(self, ttl_days: int = DEFAULT_TOKEN_TTL_DAYS):
        super().__init__(ttl_days)
        self._record: Optional[dict] = None

    def _read(self) -> Optional[dict]:
        return self._record

    def _write(self, record: dict) -> None:
        self._record = dict(record)

    def _delete(self) -> None:
        self._record = None


class FileTokenStore(TokenStore):
    """Durable token store backed by a small JSON file (owner-only permissions)."""

    def __init__(self, path: Path, ttl_days: int = DEFAULT_TOKEN_TTL_DAYS):
        super().__init__(ttl_days)
        self.path = Path(path)

    def _read(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Corrupted token file {self.path}: {e}")
            self._delete()
            return None
        return data if isinstance(data, dict) else None

    def _write(self, record: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(record), encoding="utf-8")
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)

    def _delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
