def test_health(client, db_session):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["db"]["ok"] is True
    assert data["status"] == "ok"
    assert "X-Request-ID" in r.headers


def test_health_text(client):
    r = client.get("/health.txt")
    assert r.status_code == 200
    assert r.text == "OK"


def test_request_id_is_echoed(client):
    r = client.get("/health.txt", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_unknown_route_is_json_404(client, db_session):
    r = client.get("/no-such-page")
    assert r.status_code == 404
    assert r.json()["detail"] == "Not Found"
