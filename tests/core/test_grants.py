"""Tests for lifeops.core.grants -- the reusable-approval store."""

from __future__ import annotations

import sqlite3
from unittest.mock import MagicMock

import pytest

from lifeops.core.errors import NotFoundError, PolicyViolationError
from lifeops.core.grants import GrantStore

KEY = "work-ops:catering_lead_time_hours:<=:48"


class TestGrantStore:
    def test_not_granted_by_default(self, conn):
        assert GrantStore(conn).is_granted(KEY) is False

    def test_grant_then_granted(self, conn):
        store = GrantStore(conn)
        grant = store.grant(KEY, "ap_1")
        assert grant.active is True
        assert grant.source_approval_id == "ap_1"
        assert store.is_granted(KEY) is True

    def test_grant_is_idempotent(self, conn, rows):
        store = GrantStore(conn)
        store.grant(KEY, "ap_1")
        store.grant(KEY, "ap_2")
        assert rows(conn, "approval_grants") == 1
        grants = store.list_grants()
        assert grants[0].source_approval_id == "ap_2"
        assert store.is_granted(KEY) is True

    def test_grant_requires_ids(self, conn):
        store = GrantStore(conn)
        with pytest.raises(PolicyViolationError):
            store.grant("", "ap_1")
        with pytest.raises(PolicyViolationError):
            store.grant(KEY, "")

    def test_revoke(self, conn):
        store = GrantStore(conn)
        store.grant(KEY, "ap_1")
        store.revoke(KEY)
        assert store.is_granted(KEY) is False
        assert store.list_grants(active=True) == []
        assert len(store.list_grants(active=False)) == 1

    def test_revoke_without_active_grant(self, conn):
        store = GrantStore(conn)
        with pytest.raises(NotFoundError):
            store.revoke(KEY)
        store.grant(KEY, "ap_1")
        store.revoke(KEY)
        with pytest.raises(NotFoundError):
            store.revoke(KEY)

    def test_regrant_after_revoke(self, conn):
        store = GrantStore(conn)
        store.grant(KEY, "ap_1")
        store.revoke(KEY)
        store.grant(KEY, "ap_3")
        assert store.is_granted(KEY) is True

    def test_read_failure_fails_closed(self, conn):
        repo = MagicMock()
        repo.get_active.side_effect = sqlite3.OperationalError("database is locked")
        assert GrantStore(conn, repo=repo).is_granted(KEY) is False

    def test_keys_are_exact(self, conn):
        store = GrantStore(conn)
        store.grant(KEY, "ap_1")
        assert store.is_granted("work-ops:catering_lead_time_hours:<=:24") is False
