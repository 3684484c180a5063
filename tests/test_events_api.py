from app.models.event import Event
from app.models.registration import Registration


def _event_body(year, **overrides):
    body = {
        "name": f"Tango Festival {year}",
        "year": year,
        "startDate": f"{year}-11-01T00:00:00",
        "endDate": f"{year}-11-05T00:00:00",
        "registrationOpenDate": f"{year}-01-01T00:00:00",
        "registrationCloseDate": f"{year}-10-25T00:00:00",
        "venue": "Dubai",
        "fullPackageStandardPrice": 1000,
        "fullPackage24HourPrice": 700,
        "accommodation4NightsSinglePrice": 3000,
    }
    body.update(overrides)
    return body


def test_admin_login_and_verify(client, admin_user):
    r = client.post("/api/admin/login", json={"username": "admin", "password": "S3cret!pass"})
    assert r.status_code == 200
    token = r.json()["token"]
    assert r.json()["admin"]["username"] == "admin"

    r = client.get("/api/admin/verify", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["valid"] is True


def test_bad_credentials_and_missing_token(client, admin_user):
    r = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
    assert r.status_code == 401
    assert client.get("/api/admin/verify").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/admin/verify", headers=bad).status_code == 401


def test_current_event_is_public(client, current_event):
    r = client.get("/api/events/current")
    assert r.status_code == 200
    assert r.json()["id"] == current_event.EventID
    assert r.json()["fullPackageStandardPrice"] == 1000.0


def test_no_current_event_is_404(client, db_session):
    r = client.get("/api/events/current")
    assert r.status_code == 404
    assert r.json()["detail"] == "No current event found"


def test_event_admin_routes_require_token(client, current_event):
    assert client.get("/api/events").status_code == 401
    assert client.post("/api/events", json=_event_body(2027)).status_code == 401
    assert client.put(f"/api/events/{current_event.EventID}/set-current").status_code == 401


def test_create_event_maps_camel_case_columns(client, db_session, admin_headers):
    r = client.post("/api/events", json=_event_body(2027), headers=admin_headers)
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["fullPackage24HourPrice"] == 700.0
    assert data["accommodation4NightsSinglePrice"] == 3000.0
    assert data["isCurrent"] is False


def test_create_event_validates_dates_and_year(client, current_event, admin_headers):
    body = _event_body(2027, endDate="2027-10-01T00:00:00")
    assert client.post("/api/events", json=body, headers=admin_headers).status_code == 400
    dup = client.post("/api/events", json=_event_body(current_event.Year), headers=admin_headers)
    assert dup.status_code == 400


def test_set_current_leaves_exactly_one_current(client, db_session, make_event, admin_headers):
    first = make_event(year=2025)
    second = make_event(year=2026, current=False)
    r = client.put(f"/api/events/{second.EventID}/set-current", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["isCurrent"] is True

    db_session.expire_all()
    current = db_session.query(Event).filter(Event.IsCurrent == True).all()  # noqa: E712
    assert [e.EventID for e in current] == [second.EventID]
    assert db_session.get(Event, first.EventID).IsCurrent is False


def test_creating_current_event_replaces_previous(client, db_session, current_event, admin_headers):
    r = client.post("/api/events", json=_event_body(2027, isCurrent=True), headers=admin_headers)
    assert r.status_code == 201, r.text
    db_session.expire_all()
    assert db_session.query(Event).filter(Event.IsCurrent == True).count() == 1  # noqa: E712
    assert client.get("/api/events/current").json()["year"] == 2027


def test_inactive_event_cannot_be_made_current(client, make_event, admin_headers):
    make_event(year=2025)
    inactive = make_event(year=2026, current=False, IsActive=False)
    r = client.put(f"/api/events/{inactive.EventID}/set-current", headers=admin_headers)
    assert r.status_code == 400


def test_set_current_unknown_event_is_404(client, db_session, admin_headers):
    assert client.put("/api/events/999/set-current", headers=admin_headers).status_code == 404


def test_update_event_changes_only_sent_fields(client, current_event, admin_headers):
    r = client.put(
        f"/api/events/{current_event.EventID}",
        json={"eveningPackageStandardPrice": 650},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["eveningPackageStandardPrice"] == 650.0
    assert r.json()["fullPackageStandardPrice"] == 1000.0


def test_event_with_registrations_cannot_be_deleted(client, db_session, current_event, admin_headers):
    db_session.add(
        Registration(
            EventID=current_event.EventID,
            PackageType="custom",
            Role="leader",
            TotalAmount=0,
        )
    )
    db_session.commit()
    r = client.delete(f"/api/events/{current_event.EventID}", headers=admin_headers)
    assert r.status_code == 400


def test_delete_event_removes_catalog(client, db_session, catalog, admin_headers):
    r = client.delete(f"/api/events/{catalog.EventID}", headers=admin_headers)
    assert r.status_code == 200
    db_session.expire_all()
    assert db_session.query(Event).count() == 0
    assert client.get("/api/events/current").status_code == 404


def test_listing_events(client, make_event, admin_headers):
    make_event(year=2025, current=False)
    make_event(year=2026)
    r = client.get("/api/events", headers=admin_headers)
    assert [e["year"] for e in r.json()] == [2026, 2025]
