LAYOUT = {
    "tables": [
        {"id": "t5", "name": "Table 5", "x": 120, "y": 80, "seats": 6},
        {"id": "t7", "name": "Table 7", "x": 260, "y": 80, "rotation": 45, "type": "square"},
    ],
    "stage": {"x": 0, "y": 0, "width": 400, "height": 60},
}


def test_empty_layout_without_event(client, db_session):
    r = client.get("/api/seating-layout")
    assert r.status_code == 200
    assert r.json() == {"tables": [], "stage": None}


def test_empty_layout_before_first_save(client, current_event):
    assert client.get("/api/seating-layout").json()["tables"] == []


def test_save_requires_admin(client, current_event):
    assert client.post("/api/seating-layout", json=LAYOUT).status_code == 401


def test_save_and_overwrite_layout(client, current_event, admin_headers):
    r = client.post("/api/seating-layout", json=LAYOUT, headers=admin_headers)
    assert r.status_code == 200, r.text

    data = client.get("/api/seating-layout").json()
    assert [t["id"] for t in data["tables"]] == ["t5", "t7"]
    assert data["tables"][1]["rotation"] == 45
    assert data["stage"]["width"] == 400

    r = client.post("/api/seating-layout", json={"tables": []}, headers=admin_headers)
    assert r.status_code == 200
    data = client.get("/api/seating-layout").json()
    assert data["tables"] == []
    assert data["stage"] is None
