import hashlib
import io

from fastapi.testclient import TestClient

import antlyst.main as main


client = TestClient(main.app)

SALES_CSV = b"category,amount\nA,10\nB,20\nA,30\n"


def _files(content: bytes) -> dict:
    return {"file": ("data.csv", io.BytesIO(content), "text/csv")}


def _post_dashboard(content: bytes, **params):
    return client.post("/dashboards", files=_files(content), params=params)


def test_health() -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_dashboard_roundtrip_and_cache() -> None:
    file_hash = hashlib.sha256(SALES_CSV).hexdigest()
    assert client.delete(f"/dashboards/{file_hash}").status_code == 200

    first = _post_dashboard(SALES_CSV, style="simple")
    assert first.status_code == 200
    payload = first.json()
    assert payload["file_hash"] == file_hash
    assert payload["style"] == "simple"
    assert payload["cached"] is False
    dashboard = payload["dashboard"]
    assert [kpi["value"] for kpi in dashboard["kpis"]] == ["3", "2"]
    assert [chart["title"] for chart in dashboard["charts"]] == ["Top 10 category", "Distribution of amount"]
    assert dashboard["charts"][0]["data"][0]["y"] == [2, 1]

    second = _post_dashboard(SALES_CSV, style="simple")
    assert second.json()["cached"] is True
    assert second.json()["dashboard"] == dashboard

    forced = _post_dashboard(SALES_CSV, style="simple", force="true")
    assert forced.json()["cached"] is False


def test_styles_are_cached_separately() -> None:
    content = b"x,y\n1,2\n2,4\n3,7\n"
    file_hash = hashlib.sha256(content).hexdigest()
    client.delete(f"/dashboards/{file_hash}")

    assert _post_dashboard(content, style="ml").json()["cached"] is False
    powerbi = _post_dashboard(content, style="powerbi").json()
    assert powerbi["cached"] is False
    assert powerbi["dashboard"]["layout"] == "powerbi"
    assert _post_dashboard(content, style="ml").json()["dashboard"]["layout"] == "ml"


def test_delete_invalidates_cached_dashboards() -> None:
    content = b"v\n1\n2\n3\n"
    file_hash = hashlib.sha256(content).hexdigest()
    _post_dashboard(content, style="simple")
    _post_dashboard(content, style="ml")

    resp = client.delete(f"/dashboards/{file_hash}")
    assert resp.status_code == 200
    assert resp.json()["removed"] >= 2
    assert _post_dashboard(content, style="simple").json()["cached"] is False


def test_invalid_cached_document_is_regenerated() -> None:
    content = b"w\n5\n6\n"
    file_hash = hashlib.sha256(content).hexdigest()
    main.cache.set(main._cache_key(file_hash, "dashboard", "simple"), {"layout": "simple"})

    resp = _post_dashboard(content, style="simple")
    assert resp.status_code == 200
    assert resp.json()["cached"] is False
    assert resp.json()["dashboard"]["kpis"][0]["label"] == "Total Rows"


def test_unknown_style_is_rejected() -> None:
    assert _post_dashboard(SALES_CSV, style="radar").status_code == 422


def test_empty_upload_is_rejected() -> None:
    resp = _post_dashboard(b"")
    assert resp.status_code == 400
    assert "empty" in resp.json()["detail"]


def test_oversized_upload_is_rejected(monkeypatch) -> None:
    monkeypatch.setattr(main, "MAX_UPLOAD_BYTES", 10)
    assert _post_dashboard(SALES_CSV).status_code == 400


def test_header_only_csv_is_a_parse_error() -> None:
    resp = _post_dashboard(b"a,b\n")
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Could not parse CSV")


def test_manifest_endpoint() -> None:
    resp = client.post("/manifests", files=_files(b"a,b\n1,2\n2,4\n3,6\n"))
    assert resp.status_code == 200
    manifest = resp.json()["manifest"]
    assert manifest["rowCount"] == 3
    assert manifest["correlations"]["a"]["b"] == 1.0
    assert manifest["preview"][0] == {"a": 1, "b": 2}


def test_manifest_parse_error() -> None:
    assert client.post("/manifests", files=_files(b"   \n")).status_code == 400
