"""
Tests for the current-tenant context, its middleware and logging filter.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from finance_api.services.domain import TransactionSourceService
from shared.config.logging import StructuredFormatter, mask_user_id
from shared.infrastructure.db import safe_commit
from shared.security.tenant_context import (
    TenantContextFilter,
    TenantContextMiddleware,
    current_tenant_var,
    get_current_tenant_id,
    has_current_tenant,
    tenant_scope,
)


# =============================================================================
# tenant_scope Tests
# =============================================================================

class TestTenantScope:

    def test_no_tenant_by_default(self):
        assert get_current_tenant_id() is None
        assert not has_current_tenant()

    def test_binds_and_clears(self):
        with tenant_scope(3):
            assert get_current_tenant_id() == 3
            assert has_current_tenant()
        assert get_current_tenant_id() is None

    def test_nested_scopes_restore_outer_value(self):
        with tenant_scope(1):
            with tenant_scope(2):
                assert get_current_tenant_id() == 2
            assert get_current_tenant_id() == 1

    def test_cleared_when_block_raises(self):
        with pytest.raises(RuntimeError):
            with tenant_scope(4):
                raise RuntimeError("boom")
        assert get_current_tenant_id() is None


# =============================================================================
# TenantContextMiddleware Tests
# =============================================================================

class TestTenantContextMiddleware:
    """Tests for tenant binding per request."""

    @pytest.fixture
    def app(self, db_session):
        app = FastAPI()
        app.add_middleware(TenantContextMiddleware)

        @app.get("/whoami")
        async def whoami():
            return {"tenant_id": get_current_tenant_id()}

        @app.get("/sources/count")
        async def count_sources():
            return {"count": TransactionSourceService(db_session).count()}

        return app

    def test_binds_tenant_from_header(self, app):
        client = TestClient(app)

        response = client.get("/whoami", headers={"X-User-ID": "7"})

        assert response.json() == {"tenant_id": 7}

    @pytest.mark.parametrize("headers", [{}, {"X-User-ID": "abc"}, {"X-User-ID": "-1"}, {"X-User-ID": "0"}])
    def test_invalid_or_missing_header_binds_nothing(self, app, headers):
        response = TestClient(app).get("/whoami", headers=headers)

        assert response.json() == {"tenant_id": None}

    def test_cleared_after_request(self, app):
        TestClient(app).get("/whoami", headers={"X-User-ID": "7"})

        assert current_tenant_var.get() is None

    def test_custom_resolver(self):
        app = FastAPI()
        app.add_middleware(TenantContextMiddleware, resolver=lambda request: 42)

        @app.get("/whoami")
        async def whoami():
            return {"tenant_id": get_current_tenant_id()}

        assert TestClient(app).get("/whoami").json() == {"tenant_id": 42}

    def test_missing_tenant_maps_to_401(self, app):
        response = TestClient(app).get("/sources/count")

        assert response.status_code == 401
        assert response.json()["detail"] == "User context not available"

    def test_tenant_scoped_service_inside_request(self, app, user_one, make_source):
        make_source(user_one, "Wallet")

        response = TestClient(app).get("/sources/count", headers={"X-User-ID": str(user_one.id)})

        assert response.json() == {"count": 1}


# =============================================================================
# Logging Tests
# =============================================================================

class TestLogging:

    def _record(self):
        return logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

    def test_filter_adds_tenant(self):
        record = self._record()

        with tenant_scope(9):
            assert TenantContextFilter().filter(record) is True

        assert record.tenant_id == 9

    def test_filter_placeholder_without_tenant(self):
        record = self._record()

        TenantContextFilter().filter(record)

        assert record.tenant_id == "-"

    def test_structured_formatter_includes_tenant_and_data(self):
        record = self._record()
        record.tenant_id = 9
        record.extra_data = {"entity": "TransactionSource"}

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello"
        assert data["tenant_id"] == 9
        assert data["data"] == {"entity": "TransactionSource"}

    @pytest.mark.parametrize("user_id, expected", [
        (None, "<no-user>"),
        (7, "7***"),
        (12345, "12***"),
    ])
    def test_mask_user_id(self, user_id, expected):
        assert mask_user_id(user_id) == expected


# =============================================================================
# safe_commit Tests
# =============================================================================

class TestSafeCommit:

    def test_commits(self):
        session = MagicMock()

        safe_commit(session)

        session.commit.assert_called_once()
        session.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self):
        session = MagicMock()
        session.commit.side_effect = RuntimeError("commit failed")

        with pytest.raises(RuntimeError):
            safe_commit(session)

        session.rollback.assert_called_once()
