from perfcheck.audit.fake import FakeAuditRunner, build_lighthouse_result
from perfcheck.audit.normalizer import ReportData
from perfcheck.errors import AuditError

REPORT_KEYS = {
    "id", "url", "performance", "accessibility", "bestPractices", "seo",
    "loadTime", "resourceSize", "requestCount", "timestamp",
}


def test_check_returns_persisted_report(client):
    resp = client.post("/api/check", json={"url": "https://example.com"})

    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == REPORT_KEYS
    assert body["url"] == "https://example.com"
    assert body["performance"] == 50.0
    assert body["accessibility"] == 100.0
    assert body["bestPractices"] == 25.0
    assert body["seo"] == 75.0
    assert body["loadTime"] == 1234.0
    assert body["resourceSize"] == 2097152.0
    assert body["requestCount"] == 42
    assert isinstance(body["id"], int)
    assert body["timestamp"].endswith(("Z", "+00:00"))


def test_reports_lists_newest_first(client):
    for url in ("https://one.test", "https://two.test", "https://three.test"):
        assert client.post("/api/check", json={"url": url}).status_code == 200

    resp = client.get("/api/reports")

    assert resp.status_code == 200
    urls = [r["url"] for r in resp.json()]
    assert urls == ["https://three.test", "https://two.test", "https://one.test"]
    stamps = [r["timestamp"] for r in resp.json()]
    assert stamps == sorted(stamps, reverse=True)


def test_reports_empty(client):
    resp = client.get("/api/reports")
    assert resp.status_code == 200
    assert resp.json() == []


def test_round_trip_through_list(client):
    client.app.state.store.save(ReportData(
        url="https://example.com",
        performance=87.5,
        accessibility=100,
        best_practices=91,
        seo=76,
        load_time=1234,
        resource_size=2097152,
        request_count=42,
    ))

    [report] = client.get("/api/reports").json()
    assert report["performance"] == 87.5
    assert report["accessibility"] == 100
    assert report["bestPractices"] == 91
    assert report["seo"] == 76
    assert report["loadTime"] == 1234
    assert report["resourceSize"] == 2097152
    assert report["requestCount"] == 42

    page = client.get("/dashboard").text
    assert "2.00 MB" in page
    assert "1.23s" in page
    assert "87.5%" in page


def test_missing_url_is_a_validation_error(make_client):
    runner = FakeAuditRunner()
    client = make_client(runner=runner)

    resp = client.post("/api/check", json={})

    assert resp.status_code == 500
    assert resp.json()["kind"] == "validation"
    assert resp.json()["error"]
    assert runner.calls == []


def test_malformed_url_is_a_validation_error(make_client):
    runner = FakeAuditRunner()
    client = make_client(runner=runner)

    resp = client.post("/api/check", json={"url": "ftp://example.com"})

    assert resp.status_code == 500
    assert resp.json()["kind"] == "validation"
    assert runner.calls == []


def test_malformed_body_is_a_validation_error(client):
    resp = client.post("/api/check", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 500
    assert set(resp.json()) == {"error", "kind"}
    assert resp.json()["kind"] == "validation"


def test_audit_failure_returns_500_and_saves_nothing(make_client):
    client = make_client(runner=FakeAuditRunner(error=AuditError("net::ERR_NAME_NOT_RESOLVED")))

    resp = client.post("/api/check", json={"url": "https://does-not-exist.invalid"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "net::ERR_NAME_NOT_RESOLVED",
        "kind": "audit",
    }
    assert client.get("/api/reports").json() == []


def test_audit_timeout_returns_500(make_client):
    client = make_client(runner=FakeAuditRunner(delay=2.0), AUDIT_TIMEOUT=0.05)

    resp = client.post("/api/check", json={"url": "https://slow.test"})

    assert resp.status_code == 500
    assert resp.json()["kind"] == "timeout"
    assert client.get("/api/reports").json() == []


def test_store_failure_returns_500(client):
    client.app.state.store.close()

    resp = client.get("/api/reports")
    assert resp.status_code == 500
    assert resp.json()["kind"] == "store"

    resp = client.post("/api/check", json={"url": "https://example.com"})
    assert resp.status_code == 500
    assert resp.json()["kind"] == "store"


def test_index_shows_empty_state(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert 'data-state="empty"' in resp.text
    assert 'id="check-form"' in resp.text


def test_index_shows_latest_scorecards(make_client):
    result = build_lighthouse_result(performance=0.95, accessibility=0.7, best_practices=0.1, seo=0.5)
    client = make_client(runner=FakeAuditRunner(results={"https://example.com": result}))
    client.post("/api/check", json={"url": "https://example.com"})

    page = client.get("/").text

    assert 'data-metric-card="performance" data-band="good"' in page
    assert 'data-metric-card="accessibility" data-band="needs-improvement"' in page
    assert 'data-metric-card="bestPractices" data-band="poor"' in page
    assert 'data-metric-card="seo" data-band="needs-improvement"' in page
    assert 'id="history-data"' in page


def test_index_survives_store_failure(client):
    client.app.state.store.close()
    resp = client.get("/")
    assert resp.status_code == 200
    assert "not open" in resp.text


def test_dashboard_fragment_keeps_selected_metric(client):
    client.post("/api/check", json={"url": "https://example.com"})

    page = client.get("/dashboard", params={"metric": "seo"}).text

    assert "<html" not in page
    assert '&#34;active&#34;: &#34;seo&#34;' in page or '"active": "seo"' in page


def test_dashboard_fragment_carries_metric_labels(client):
    client.post("/api/check", json={"url": "https://example.com"})

    page = client.get("/dashboard").text

    assert '"bestPractices": "Best Practices"' in page or '&#34;bestPractices&#34;: &#34;Best Practices&#34;' in page


def test_history_png(client):
    client.post("/api/check", json={"url": "https://example.com"})

    resp = client.get("/api/reports/history.png", params={"metric": "bestPractices"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content.startswith(b"\x89PNG")


def test_history_png_unknown_metric(client):
    resp = client.get("/api/reports/history.png", params={"metric": "loadTime"})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True, "app": "perfcheck", "runner": "fake"}
