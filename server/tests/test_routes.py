"""Integration tests for the HTTP surface: health, admin exports, image proxy, lifespan."""

from __future__ import annotations

import csv
import io
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from openpyxl import load_workbook

from server import main
from server.config import settings
from server.main import app
from server.models.submission import NewSubmission
from server.services.r2 import R2Service, StoredImage, r2_service


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def history(repo):
    """Three submissions in history, routed into the admin export."""
    for name, idx in (("Ada", 3), ('Grace "Amazing" Hopper', 0), ("Linus, T.", 3)):
        await repo.insert(
            NewSubmission(
                id=uuid4(),
                name=name,
                region="North",
                question="What is the 'Why' that drives you?",
                tile_index=idx,
                image_key=f"submissions/{idx}.png",
                image_url=f"https://cdn.test/submissions/{idx}.png",
            )
        )
    with patch("server.routes.admin.submission_repo", repo):
        yield repo


# ── health ──────────────────────────────────────────────────────────────────


async def test_health_endpoint(async_client):
    """GET /health → {"status": "ok"}."""
    res = await async_client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


# ── admin exports ──────────────────────────────────────────────────────────


class TestAdminExport:
    """Tests for /admin/export.csv and /admin/export.xlsx."""

    @pytest.mark.parametrize("path", ["/admin/export.csv", "/admin/export.xlsx"])
    async def test_missing_key_unauthorized(self, async_client, history, path):
        res = await async_client.get(path)
        assert res.status_code == 401

    @pytest.mark.parametrize("path", ["/admin/export.csv", "/admin/export.xlsx"])
    async def test_wrong_key_unauthorized(self, async_client, history, path):
        res = await async_client.get(path, params={"key": "guess"})
        assert res.status_code == 401

    async def test_unset_admin_key_locks_exports(self, async_client, history):
        with patch.object(settings, "ADMIN_KEY", ""):
            res = await async_client.get("/admin/export.csv", params={"key": ""})
        assert res.status_code == 401

    async def test_csv_export(self, async_client, history):
        res = await async_client.get("/admin/export.csv", params={"key": "test-admin-key"})
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert 'filename="wall-submissions.csv"' in res.headers["content-disposition"]

        lines = res.text.splitlines()
        assert lines[0] == '"id","name","region","question","tile_index","image_url","created_at"'
        assert '"Grace ""Amazing"" Hopper"' in lines[2]

        rows = list(csv.DictReader(io.StringIO(res.text)))
        assert [r["name"] for r in rows] == ["Ada", 'Grace "Amazing" Hopper', "Linus, T."]
        assert [r["tile_index"] for r in rows] == ["3", "0", "3"]
        assert rows[0]["created_at"] < rows[1]["created_at"] < rows[2]["created_at"]

    async def test_xlsx_export(self, async_client, history):
        res = await async_client.get("/admin/export.xlsx", params={"key": "test-admin-key"})
        assert res.status_code == 200
        assert 'filename="wall-submissions.xlsx"' in res.headers["content-disposition"]

        wb = load_workbook(io.BytesIO(res.content))
        ws = wb["Submissions"]
        rows = list(ws.iter_rows(values_only=True))
        assert rows[0] == ("id", "name", "region", "question", "tile_index", "image_url", "created_at")
        assert [r[1] for r in rows[1:]] == ["Ada", 'Grace "Amazing" Hopper', "Linus, T."]
        assert ws["A1"].font.bold

    async def test_empty_history(self, async_client, repo):
        with patch("server.routes.admin.submission_repo", repo):
            res = await async_client.get("/admin/export.csv", params={"key": "test-admin-key"})
        assert res.status_code == 200
        assert len(res.text.splitlines()) == 1


# ── image proxy ────────────────────────────────────────────────────────────


class TestImageProxy:
    """Tests for GET /img/{key}."""

    async def test_serves_image_with_immutable_cache(self, async_client):
        image = StoredImage(body=b"\x89PNG...", content_type="image/png")
        with patch.object(r2_service, "get_image", AsyncMock(return_value=image)) as get_image:
            res = await async_client.get("/img/submissions/abc.png")

        get_image.assert_awaited_once_with("submissions/abc.png")
        assert res.status_code == 200
        assert res.content == b"\x89PNG..."
        assert res.headers["content-type"] == "image/png"
        assert res.headers["cache-control"] == "public, max-age=31536000, immutable"

    async def test_missing_object_404(self, async_client):
        with patch.object(r2_service, "get_image", AsyncMock(return_value=None)):
            res = await async_client.get("/img/submissions/missing.png")
        assert res.status_code == 404

    async def test_r2_error_404(self, async_client):
        err = ClientError({"Error": {"Code": "AccessDenied"}}, "GetObject")
        with patch.object(r2_service, "get_image", AsyncMock(side_effect=err)):
            res = await async_client.get("/img/submissions/x.png")
        assert res.status_code == 404

    async def test_empty_key_400(self, async_client):
        res = await async_client.get("/img/")
        assert res.status_code == 400

    async def test_bucket_not_configured_500(self, async_client):
        with patch.object(r2_service, "bucket", ""):
            res = await async_client.get("/img/submissions/x.png")
        assert res.status_code == 500


# ── R2 service ─────────────────────────────────────────────────────────────


class TestR2Service:
    def test_configured_from_settings(self):
        assert R2Service().configured

    def test_public_base_url_trailing_slash_stripped(self):
        assert R2Service().public_url("submissions/a.png") == "https://cdn.test/submissions/a.png"

    def test_unconfigured_without_bucket(self):
        svc = R2Service()
        svc.bucket = ""
        assert not svc.configured


# ── lifespan ───────────────────────────────────────────────────────────────


class TestLifespan:
    async def test_startup_restores_wall(self):
        with (
            patch.object(main.db, "init_pool", AsyncMock()) as init_pool,
            patch.object(main.db, "close_pool", AsyncMock()) as close_pool,
            patch.object(main.wall_service, "recover", AsyncMock(return_value=4)) as recover,
        ):
            async with main.lifespan(app):
                init_pool.assert_awaited_once()
                recover.assert_awaited_once()
                close_pool.assert_not_awaited()
            close_pool.assert_awaited_once()

    async def test_recovery_failure_is_fatal(self):
        with (
            patch.object(main.db, "init_pool", AsyncMock()),
            patch.object(main.db, "close_pool", AsyncMock()) as close_pool,
            patch.object(main.wall_service, "recover", AsyncMock(side_effect=OSError("db unreachable"))),
        ):
            with pytest.raises(OSError):
                async with main.lifespan(app):
                    pytest.fail("server must not start with an unknown wall")
            close_pool.assert_awaited_once()
