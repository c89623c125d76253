from fastapi.testclient import TestClient

from siarni.core.config import AppPaths, Settings
from siarni.infrastructure.ai.gemini_extractor import GeminiExtractor
from siarni.infrastructure.db.repos.record_repo import RecordRepo
from siarni.infrastructure.db.sqlite import get_connection
from siarni.web.app import create_app

RECORD_FORM = {
    "husband_name": "Ahmad Sutrisno",
    "wife_name": "Siti Aminah",
    "marriage_date": "2024-05-01",
    "nomor_nb": "001/2024",
    "nomor_akta": "045/2024",
    "kecamatan": "Sumbersari",
    "nomor_bok": "B-12",
    "lokasi_simpan": "KUA Sumbersari",
    "extracted_text": "...",
    "uploaded_by": "Admin_KUA",
}
REFERENCE_FINGERPRINT = "ac9a0d1cf1d2462ef33605edccf2725e19027c451dcf7d1e460ffae2470d0246"


def _client(app_paths: AppPaths, **settings) -> TestClient:
    return TestClient(create_app(app_paths, Settings(public_base_url="https://arsip.example/", **settings)))


def test_web_app_end_to_end_smoke(app_paths: AppPaths) -> None:
    client = _client(app_paths)

    r = client.post("/api/init")
    assert r.status_code == 200

    r = client.get("/")
    assert r.status_code == 200
    assert "SI-ARNI" in r.text

    files = [("files", ("page1.jpg", b"page one bytes", "image/jpeg"))]
    r = client.post("/api/records", data=RECORD_FORM, files=files)
    assert r.status_code == 200
    record = r.json()["record"]
    assert record["fingerprint"] == REFERENCE_FINGERPRINT
    assert record["verified"] is True
    assert record["verify_link"] == f"https://arsip.example/?verify={REFERENCE_FINGERPRINT}"
    assert len(record["attachments"]) == 1
    record_id = record["id"]
    attachment_id = record["attachments"][0]["id"]

    r = client.get("/api/records", params={"search": "siti"})
    assert r.status_code == 200
    assert r.json()["count"] == 1

    r = client.get("/api/records", params={"kecamatan": "Patrang"})
    assert r.json()["count"] == 0

    r = client.get(f"/api/records/{record_id}")
    assert r.status_code == 200
    assert r.json()["record"]["nomor_akta"] == "045/2024"

    r = client.get(f"/api/records/{record_id}/attachments/{attachment_id}/content")
    assert r.status_code == 200
    assert r.content == b"page one bytes"
    assert r.headers.get("content-disposition", "").startswith("inline;")

    r = client.get(f"/api/records/{record_id}/verify")
    assert r.status_code == 200
    assert r.json()["check"]["verified"] is True

    r = client.get(f"/api/records/{record_id}/link")
    assert r.status_code == 200
    assert r.json()["link"] == f"https://arsip.example/?verify={REFERENCE_FINGERPRINT}"
    assert r.json()["qr_url"].startswith("https://api.qrserver.com/v1/create-qr-code/?size=200x200")

    r = client.get(f"/api/records/{record_id}/qr.png")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")

    r = client.get("/api/dashboard/summary")
    assert r.status_code == 200
    summary = r.json()
    assert summary["total_records"] == 1
    assert summary["by_kecamatan"] == {"Sumbersari": 1}
    assert summary["services"] == {"ai_extraction": False}

    r = client.get("/api/integrity")
    assert r.status_code == 200
    assert r.json()["verified"] == 1

    r = client.get("/api/doctor")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_create_record_validation_errors(app_paths: AppPaths) -> None:
    client = _client(app_paths)

    r = client.post("/api/records", data={"husband_name": "Ahmad"})
    assert r.status_code == 400
    assert "wife_name" in r.json()["detail"]

    r = client.get("/api/records/missing")
    assert r.status_code == 404
    r = client.get("/api/records/missing/verify")
    assert r.status_code == 404


def test_public_verification_flow(app_paths: AppPaths) -> None:
    client = _client(app_paths)
    record = client.post("/api/records", data=RECORD_FORM).json()["record"]

    r = client.get("/api/verify", params={"fingerprint": record["fingerprint"]})
    assert r.json()["status"] == "SUCCESS"
    assert r.json()["record"]["husband_name"] == "Ahmad Sutrisno"

    r = client.get("/", params={"verify": record["fingerprint"]})
    assert r.status_code == 200
    assert "Terverifikasi Asli" in r.text

    r = client.get("/", params={"verify": "0" * 64})
    assert "Data Tidak Ditemukan" in r.text
    assert client.get("/api/verify", params={"fingerprint": "0" * 64}).json()["status"] == "NOT_FOUND"

    with get_connection(app_paths.db_path) as conn:
        conn.execute("UPDATE marriage_records SET nomor_akta = '999/2024' WHERE id = ?", (record["id"],))
        conn.commit()

    r = client.get("/api/verify", params={"fingerprint": record["fingerprint"]})
    assert r.json()["status"] == "TAMPERED"
    assert r.json()["ok"] is False
    assert r.json()["record"] is None

    r = client.get("/", params={"verify": record["fingerprint"]})
    assert "Data Palsu / Berubah!" in r.text

    r = client.get("/api/integrity")
    assert r.json()["ok"] is False
    assert r.json()["failed"] == 1


def test_fingerprint_endpoint_matches_reference(app_paths: AppPaths) -> None:
    client = _client(app_paths)
    payload = {k: v for k, v in RECORD_FORM.items() if k != "uploaded_by"}

    r = client.post("/api/fingerprint", json=payload)

    assert r.status_code == 200
    assert r.json()["fingerprint"] == REFERENCE_FINGERPRINT
    assert r.json()["canonical"] == "AHMAD SUTRISNO|SITI AMINAH|2024-05-01|001/2024|045/2024|SUMBERSARI|B-12|KUA SUMBERSARI|..."


def test_extract_endpoint(app_paths: AppPaths, monkeypatch) -> None:
    client = _client(app_paths)
    files = [("files", ("page1.jpg", b"page one bytes", "image/jpeg"))]

    r = client.post("/api/extract", files=files)
    assert r.status_code == 503

    def fake_extract(self, documents):
        assert documents[0].mime_type == "image/jpeg"
        return {"husbandName": "Ahmad Sutrisno", "wifeName": "Siti Aminah", "nomorAkta": "045/2024"}

    monkeypatch.setattr(GeminiExtractor, "extract", fake_extract)
    r = client.post("/api/extract", files=files)
    assert r.status_code == 200
    fields = r.json()["fields"]
    assert fields["husband_name"] == "Ahmad Sutrisno"
    assert fields["nomor_nb"] == ""


def test_duplicate_upload_is_rejected_when_lookup_misses_it(app_paths: AppPaths, monkeypatch) -> None:
    client = _client(app_paths)
    assert client.post("/api/records", data=RECORD_FORM).status_code == 200
    monkeypatch.setattr(RecordRepo, "get_by_fingerprint", lambda self, fingerprint: None)

    r = client.post("/api/records", data=RECORD_FORM)

    assert r.status_code == 400
    assert REFERENCE_FINGERPRINT in r.json()["detail"]


def test_empty_verify_param_serves_archive_ui(app_paths: AppPaths) -> None:
    client = _client(app_paths)

    r = client.get("/", params={"verify": ""})

    assert r.status_code == 200
    assert "Arsip Digital" in r.text
    assert "Data Tidak Ditemukan" not in r.text
