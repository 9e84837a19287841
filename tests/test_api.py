"""Tests for the HTTP surface.

Run with: pytest tests/test_api.py -v
"""

import io

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfReader

from conftest import schedule
from daysplit.config import settings
from daysplit.main import app
from daysplit.storage import local as storage
from daysplit.storage import token_store

client = TestClient(app)

AUTH = ("admin", "secret")


def _upload(name: str, pdf: bytes, csv: bytes):
    return client.post(
        "/api/models/upload",
        data={"modelName": name},
        files={
            "pdf": ("calendar.pdf", pdf, "application/pdf"),
            "csv": ("days.csv", csv, "text/csv"),
        },
        auth=AUTH,
    )


@pytest.fixture
def uploaded(ten_page_pdf, two_day_csv) -> dict[int, str]:
    """Upload model "test" and return its day -> token mapping."""
    response = _upload("test", ten_page_pdf, two_day_csv)
    assert response.status_code == 200, response.text
    tokens_file = token_store.read_tokens("test")
    return {mapping.day: token for token, mapping in tokens_file.tokens.items()}


class TestPublicRoutes:
    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self):
        assert client.get("/").status_code == 200

    def test_download_by_token(self, uploaded):
        response = client.get(f"/api/download/{uploaded[2]}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'inline; filename="day-2.pdf"'
        assert "max-age=31536000" in response.headers["cache-control"]
        assert len(PdfReader(io.BytesIO(response.content)).pages) == 5

    @pytest.mark.parametrize("token", ["abc", "g" * 32, "A" * 32, "a" * 33])
    def test_download_bad_format(self, token):
        assert client.get(f"/api/download/{token}").status_code == 400

    def test_download_unknown_token(self, uploaded):
        assert client.get(f"/api/download/{'0' * 32}").status_code == 404

    def test_download_missing_day_file(self, uploaded):
        storage.day_pdf_path("test", 1).unlink()
        assert client.get(f"/api/download/{uploaded[1]}").status_code == 404


class TestAuth:
    def test_requires_credentials(self):
        response = client.get("/api/models")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Basic"

    def test_wrong_password(self):
        assert client.get("/api/models", auth=("admin", "nope")).status_code == 401

    def test_upload_requires_credentials(self, ten_page_pdf, two_day_csv):
        response = client.post(
            "/api/models/upload",
            data={"modelName": "test"},
            files={"pdf": ("c.pdf", ten_page_pdf), "csv": ("d.csv", two_day_csv)},
        )
        assert response.status_code == 401
        assert not storage.model_dir("test").exists()

    def test_auth_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "basic_auth_enabled", False)
        assert client.get("/api/models").status_code == 200


class TestUpload:
    def test_upload_creates_model(self, uploaded):
        model_dir = storage.model_dir("test")
        assert sorted(p.name for p in model_dir.iterdir()) == [
            "day-1.pdf",
            "day-2.pdf",
            "qr-codes.pdf",
            "source.csv",
            "source.pdf",
            "tokens.json",
        ]
        assert sorted(uploaded) == [1, 2]

    def test_upload_response(self, ten_page_pdf, two_day_csv):
        body = _upload("test", ten_page_pdf, two_day_csv).json()
        assert body["success"] is True
        assert body["name"] == "test"

    def test_duplicate_is_conflict(self, uploaded, ten_page_pdf, two_day_csv):
        response = _upload("test", ten_page_pdf, two_day_csv)
        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_page_out_of_range_rejected(self, ten_page_pdf):
        response = _upload("test", ten_page_pdf, schedule((1, 1, 1, 1, 5), (2, 2, 2, 6, 11)))
        assert response.status_code == 400
        assert "exceeds total pages" in response.json()["detail"]
        assert not storage.model_dir("test").exists()

    def test_missing_model_name(self, ten_page_pdf, two_day_csv):
        response = client.post(
            "/api/models/upload",
            files={"pdf": ("c.pdf", ten_page_pdf), "csv": ("d.csv", two_day_csv)},
            auth=AUTH,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Model name is required"

    def test_missing_csv(self, ten_page_pdf):
        response = client.post(
            "/api/models/upload",
            data={"modelName": "test"},
            files={"pdf": ("c.pdf", ten_page_pdf)},
            auth=AUTH,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "CSV file is required"

    def test_wrong_extension(self, ten_page_pdf, two_day_csv):
        response = client.post(
            "/api/models/upload",
            data={"modelName": "test"},
            files={"pdf": ("c.png", ten_page_pdf), "csv": ("d.csv", two_day_csv)},
            auth=AUTH,
        )
        assert response.status_code == 400

    def test_unexpected_error_is_500(self, monkeypatch, ten_page_pdf, two_day_csv):
        from daysplit.services import model_lifecycle

        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(model_lifecycle, "generate_qr_sheet", boom)
        response = _upload("test", ten_page_pdf, two_day_csv)
        assert response.status_code == 500
        assert response.json()["detail"] == "disk on fire"
        assert not storage.model_dir("test").exists()


class TestModelRoutes:
    def test_list(self, uploaded):
        response = client.get("/api/models", auth=AUTH)
        assert response.status_code == 200
        assert response.json() == [{"name": "test", "days": 2}]

    def test_detail(self, uploaded):
        body = client.get("/api/models/test", auth=AUTH).json()
        assert body["model"] == "test"
        assert body["total_days"] == 2
        assert body["days"][0] == {
            "day": 1,
            "filename": "day-1.pdf",
            "url": f"/api/download/{uploaded[1]}",
        }

    def test_detail_missing(self):
        assert client.get("/api/models/ghost", auth=AUTH).status_code == 404

    def test_detail_bad_name(self):
        assert client.get("/api/models/bad$name", auth=AUTH).status_code == 400

    def test_legacy_day(self, uploaded):
        response = client.get("/api/models/test/1.pdf", auth=AUTH)
        assert response.status_code == 200
        assert len(PdfReader(io.BytesIO(response.content)).pages) == 5

    def test_legacy_day_invalid(self, uploaded):
        assert client.get("/api/models/test/one.pdf", auth=AUTH).status_code == 400

    def test_legacy_day_missing(self, uploaded):
        assert client.get("/api/models/test/9.pdf", auth=AUTH).status_code == 404

    def test_qr_codes(self, uploaded):
        response = client.get("/api/models/test/qr-codes.get", auth=AUTH)
        assert response.status_code == 200
        assert "test-qr-codes.pdf" in response.headers["content-disposition"]
        assert len(PdfReader(io.BytesIO(response.content)).pages[0].images) == 2

    def test_qr_codes_missing(self, uploaded):
        storage.qr_sheet_path("test").unlink()
        assert client.get("/api/models/test/qr-codes.get", auth=AUTH).status_code == 404

    def test_regenerate(self, uploaded):
        storage.qr_sheet_path("test").unlink()
        response = client.post("/api/models/test/regenerate-qr-codes", auth=AUTH)
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert storage.qr_sheet_path("test").exists()
        regenerated = token_store.read_tokens("test")
        assert {m.day: t for t, m in regenerated.tokens.items()} == uploaded

    def test_regenerate_without_tokens(self, uploaded):
        storage.tokens_path("test").unlink()
        response = client.post("/api/models/test/regenerate-qr-codes", auth=AUTH)
        assert response.status_code == 400

    def test_regenerate_missing_model(self):
        assert client.post("/api/models/ghost/regenerate-qr-codes", auth=AUTH).status_code == 404

    def test_pdf_backup(self, uploaded):
        response = client.get("/api/models/test/pdf-backup", auth=AUTH)
        assert response.status_code == 200
        assert 'filename="calendar-test-backup.pdf"' in response.headers["content-disposition"]
        assert len(PdfReader(io.BytesIO(response.content)).pages) == 12

    def test_pdf_backup_missing(self):
        assert client.get("/api/models/ghost/pdf-backup", auth=AUTH).status_code == 404

    def test_delete(self, uploaded):
        response = client.delete("/api/models/test/delete", auth=AUTH)
        assert response.status_code == 200
        assert not storage.model_dir("test").exists()
        assert client.get(f"/api/download/{uploaded[1]}").status_code == 404

    def test_delete_missing(self):
        assert client.delete("/api/models/ghost/delete", auth=AUTH).status_code == 404
