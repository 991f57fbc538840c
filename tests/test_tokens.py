"""Tests for token storage"""
import json
import os
import stat
from datetime import datetime, timedelta, timezone

import pytest

from storefront.http import FileTokenStore, MemoryTokenStore


def _expired_record(token: str = "old") -> dict:
    return {"token": token, "expires_at": (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()}


class TestMemoryTokenStore:
    def test_empty_store(self):
        assert MemoryTokenStore().get() is None

    def test_set_and_get(self):
        store = MemoryTokenStore()
        store.set("abc")
        assert store.get() == "abc"

    def test_clear(self):
        store = MemoryTokenStore()
        store.set("abc")
        store.clear()
        assert store.get() is None

    def test_expiry_is_seven_days(self):
        store = MemoryTokenStore()
        store.set("abc")

        expires_at = datetime.fromisoformat(store._record["expires_at"])
        delta = expires_at - datetime.now(timezone.utc)
        assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)

    def test_expired_token_is_purged(self):
        store = MemoryTokenStore()
        store._write(_expired_record())

        assert store.get() is None
        assert store._record is None

    def test_unreadable_expiry_is_purged(self):
        store = MemoryTokenStore()
        store._write({"token": "abc", "expires_at": "next tuesday"})

        assert store.get() is None
        assert store._record is None


class TestFileTokenStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "session" / "token.json"
        FileTokenStore(path).set("abc")

        assert FileTokenStore(path).get() == "abc"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_owner_only_permissions(self, tmp_path):
        path = tmp_path / "token.json"
        FileTokenStore(path).set("abc")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "token.json"
        store = FileTokenStore(path)
        store.set("abc")

        store.clear()
        store.clear()

        assert not path.exists()
        assert store.get() is None

    def test_corrupted_file_is_discarded(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text("{not json", encoding="utf-8")

        assert FileTokenStore(path).get() is None
        assert not path.exists()

    def test_expired_file_token(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text(json.dumps(_expired_record()), encoding="utf-8")

        assert FileTokenStore(path).get() is None
        assert not path.exists()

    def test_custom_ttl(self, tmp_path):
        store = FileTokenStore(tmp_path / "token.json", ttl_days=1)
        store.set("abc")

        record = json.loads((tmp_path / "token.json").read_text(encoding="utf-8"))
        delta = datetime.fromisoformat(record["expires_at"]) - datetime.now(timezone.utc)
        assert delta <= timedelta(days=1)

    def test_naive_expiry_is_read_as_utc(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text(json.dumps({"token": "abc", "expires_at": "2999-01-01T00:00:00"}), encoding="utf-8")

        assert FileTokenStore(path).get() == "abc"

    def test_naive_expiry_in_the_past_is_purged(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text(json.dumps({"token": "abc", "expires_at": "2000-01-01T00:00:00"}), encoding="utf-8")

        assert FileTokenStore(path).get() is None
        assert not path.exists()
