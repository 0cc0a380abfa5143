def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert data["endpoint"] == "/api/jira"
    assert data["request_id"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "uptime_seconds" in data


def test_ready_reports_live_mode(client):
    data = client.get("/ready").json()
    assert data["jiraConfigured"] is True
    assert data["mode"] == "live"


def test_ready_reports_mock_mode(unconfigured_client):
    data = unconfigured_client.get("/ready").json()
    assert data["jiraConfigured"] is False
    assert data["mode"] == "mock"
