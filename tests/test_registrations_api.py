from datetime import timedelta

import pytest

from app.core.clock import utcnow
from app.core.settings import settings
from app.models import AppErrorLog
from app.models.gala import GalaTable
from app.models.registration import Registration
from app.models.workshop import Milonga, Workshop


def _table(db, number):
    return db.query(GalaTable).filter(GalaTable.TableNumber == number).one()


def _register(client, **payload):
    body = {"role": "leader", "packageType": "custom", "leaderInfo": {"name": "Ana"}}
    body.update(payload)
    return client.post("/api/registrations", json=body)


def test_submission_recomputes_total_and_ignores_client_figure(client, catalog, db_session):
    r = _register(client, role="couple", selectedTableNumber=5, totalAmount=5)
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["totalAmount"] == 800.0
    assert data["paymentStatus"] == "pending"
    assert data["currency"] == settings.CURRENCY.upper()
    assert [li["kind"] for li in data["priceBreakdown"]] == ["package", "seat"]
    assert _table(db_session, 5).OccupiedSeats == 2


def test_addons_are_stored_flattened(client, catalog):
    r = _register(
        client,
        role="couple",
        addons=[
            {"code": "mug", "quantity": 2},
            {"code": "tshirt", "quantity": 1, "options": {"size": "M"}},
            {"code": "desert-transport", "quantity": 1},
        ],
    )
    assert r.status_code == 201, r.text
    data = r.json()
    # 40 mugs + 35 shirt + 150 transport for two
    assert data["totalAmount"] == 225.0
    addons = {(a["code"], a["options"].get("size")): a["quantity"] for a in data["addons"]}
    assert addons == {("mug", None): 2, ("desert-transport", None): 2, ("tshirt", "M"): 1}


def test_couple_cannot_take_last_seat(client, catalog, db_session):
    r = _register(client, role="couple", selectedTableNumber=7)
    assert r.status_code == 400
    assert "Table 7" in r.json()["detail"]
    assert db_session.query(Registration).count() == 0
    assert _table(db_session, 7).OccupiedSeats == 5


def test_single_dancer_can_take_last_seat(client, catalog, db_session):
    r = _register(client, selectedTableNumber=7)
    assert r.status_code == 201, r.text
    assert r.json()["totalAmount"] == 300.0
    assert _table(db_session, 7).OccupiedSeats == 6


def test_unknown_table_is_rejected(client, catalog):
    assert _register(client, selectedTableNumber=99).status_code == 400


def test_clashing_workshops_are_rejected(client, catalog):
    r = _register(client, packageType="full", selectedTableNumber=5, workshopIds=[1, 2])
    assert r.status_code == 400
    assert "same time" in r.json()["detail"]


def test_full_workshop_is_rejected(client, catalog):
    r = _register(client, packageType="full", selectedTableNumber=5, workshopIds=[3])
    assert r.status_code == 400


def test_unknown_addon_is_rejected_on_submit(client, catalog):
    r = _register(client, addons=[{"code": "ghost", "quantity": 1}])
    assert r.status_code == 400


def test_gala_step_must_be_complete(client, catalog):
    assert _register(client, packageType="full").status_code == 400
    # evening needs an explicit workshop answer once a table is chosen
    assert _register(client, packageType="evening", selectedTableNumber=5).status_code == 400
    r = _register(client, packageType="evening", selectedTableNumber=5, wantsWorkshops=False)
    assert r.status_code == 201, r.text
    assert r.json()["wantsWorkshops"] is False


def test_invalid_payment_method_is_rejected(client, catalog):
    assert _register(client, paymentMethod="barter").status_code == 400


def test_registration_window_is_enforced(client, make_event):
    now = utcnow()
    make_event(
        RegistrationOpenDate=now - timedelta(days=30),
        RegistrationCloseDate=now - timedelta(days=1),
    )
    r = _register(client)
    assert r.status_code == 400
    assert "not open" in r.json()["detail"]


def test_no_current_event_returns_404(client, db_session):
    assert _register(client).status_code == 404


def test_enrollment_counts_move_with_registration(client, catalog, db_session, admin_headers):
    r = _register(
        client, role="couple", packageType="full", selectedTableNumber=5, workshopIds=[1], milongaIds=[1]
    )
    assert r.status_code == 201, r.text
    reg_id = r.json()["id"]

    workshop = db_session.get(Workshop, 1)
    milonga = db_session.get(Milonga, 1)
    assert workshop.Enrolled == 2
    assert workshop.LeadersEnrolled == 1 and workshop.FollowersEnrolled == 1
    assert milonga.Enrolled == 2
    # milongas are bundled into the full package
    assert r.json()["totalAmount"] == 2000.0

    d = client.delete(f"/api/registrations/{reg_id}", headers=admin_headers)
    assert d.status_code == 200
    db_session.expire_all()
    assert db_session.get(Workshop, 1).Enrolled == 0
    assert db_session.get(Milonga, 1).Enrolled == 0
    assert _table(db_session, 5).OccupiedSeats == 0
    assert client.get(f"/api/registrations/{reg_id}").status_code == 404


def test_listing_registrations_requires_admin(client, catalog, admin_headers):
    _register(client)
    assert client.get("/api/registrations").status_code == 401
    r = client.get("/api/registrations", headers=admin_headers, params={"status": "pending"})
    assert r.status_code == 200
    assert len(r.json()) == 1
    r = client.get("/api/registrations", headers=admin_headers, params={"status": "completed"})
    assert r.json() == []


def test_payment_status_transitions(client, catalog):
    reg_id = _register(client, selectedTableNumber=5).json()["id"]
    url = f"/api/registrations/{reg_id}/payment"

    r = client.put(url, json={"status": "pending"})
    assert r.status_code == 200 and r.json()["paymentStatus"] == "pending"

    r = client.put(url, json={"status": "completed", "paymentIntentId": "pi_123"})
    assert r.status_code == 200
    assert r.json()["paidAt"] is not None
    assert r.json()["stripePaymentIntentId"] == "pi_123"

    r = client.put(url, json={"status": "pending"})
    assert r.status_code == 400


def test_failed_payment_can_be_retried(client, catalog):
    reg_id = _register(client, selectedTableNumber=5).json()["id"]
    url = f"/api/registrations/{reg_id}/payment"
    assert client.put(url, json={"status": "failed"}).status_code == 200
    assert client.put(url, json={"status": "pending"}).status_code == 200


def test_qr_code_is_png(client, catalog):
    reg_id = _register(client).json()["id"]
    r = client.get(f"/api/registrations/{reg_id}/qr")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")


def test_payment_intent_requires_stripe_key(client, catalog, monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")
    reg_id = _register(client, selectedTableNumber=5).json()["id"]
    r = client.post("/api/create-payment-intent", json={"registrationId": reg_id})
    assert r.status_code == 500


def test_payment_intent_rejects_zero_total(client, catalog):
    reg_id = _register(client).json()["id"]
    r = client.post("/api/create-payment-intent", json={"registrationId": reg_id})
    assert r.status_code == 400


def test_unknown_registration_is_logged(client, db_session):
    r = client.get("/api/registrations/does-not-exist")
    assert r.status_code == 404
    assert r.json()["detail"] == "Registration not found"
    row = db_session.query(AppErrorLog).filter(AppErrorLog.StatusCode == 404).first()
    assert row is not None
    assert row.Path == "/api/registrations/does-not-exist"


@pytest.mark.parametrize("payload", [{"role": "soloist"}, {"packageType": "platinum"}])
def test_invalid_role_or_package(client, catalog, payload):
    assert _register(client, **payload).status_code == 400


def test_declined_workshops_with_stale_ids_can_submit(client, catalog, db_session):
    r = _register(
        client, packageType="evening", selectedTableNumber=5, wantsWorkshops=False, workshopIds=[1]
    )
    assert r.status_code == 201, r.text
    assert r.json()["workshopIds"] == []
    assert db_session.get(Workshop, 1).Enrolled == 0
