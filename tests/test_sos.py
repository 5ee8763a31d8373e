"""SOS intake tests."""

import pytest

from civicdesk.core.exceptions import NotFound, ValidationFailure
from civicdesk.models import UserRole
from civicdesk.models.sos_report import SosReport
from civicdesk.services.notification_service import NotificationDispatcher, SqlRecipientDirectory
from civicdesk.services.sos_service import create_sos_report, get_sos_report, list_sos_reports


@pytest.fixture
def dispatcher(db, sink):
    return NotificationDispatcher(SqlRecipientDirectory(db), sink)


def test_create_sos_persists_then_notifies(db, sink, dispatcher, make_user):
    citizen = make_user()
    make_user(UserRole.ADMIN)
    make_user(UserRole.STAFF)
    stored_at_send = []
    sink.on_send = lambda recipient, payload: stored_at_send.append(
        db.get(SosReport, payload["sourceId"]) is not None
    )

    sos = create_sos_report(db, 10.76, 106.66, citizen.id, dispatcher)

    assert sos.id is not None
    assert sos.user_id == citizen.id
    assert stored_at_send == [True, True]
    assert [p["sourceId"] for _, p in sink.sent] == [sos.id, sos.id]
    assert sink.sent[0][1]["userId"] == citizen.id


@pytest.mark.parametrize("lat,lng", [(91, 0), (-90.5, 0), (0, 180.1), (0, -181), (float("nan"), 0)])
def test_create_sos_rejects_bad_coordinates(db, sink, dispatcher, make_user, lat, lng):
    citizen = make_user()
    make_user(UserRole.ADMIN)

    with pytest.raises(ValidationFailure):
        create_sos_report(db, lat, lng, citizen.id, dispatcher)

    assert db.query(SosReport).count() == 0
    assert sink.sent == []


def test_create_sos_boundary_coordinates(db, dispatcher, make_user):
    citizen = make_user()
    sos = create_sos_report(db, -90, 180, citizen.id, dispatcher)
    assert (sos.lat, sos.lng) == (-90, 180)


def test_create_sos_unknown_user(db, dispatcher):
    with pytest.raises(NotFound):
        create_sos_report(db, 1.0, 1.0, 999, dispatcher)
    assert db.query(SosReport).count() == 0


def test_dispatcher_crash_keeps_the_alert(db, make_user):
    citizen = make_user()

    class BrokenDispatcher:
        def notify(self, event):
            raise RuntimeError("directory offline")

    sos = create_sos_report(db, 1.0, 2.0, citizen.id, BrokenDispatcher())

    assert db.get(SosReport, sos.id) is not None


def test_list_and_get_sos(db, dispatcher, make_user, minutes):
    citizen = make_user()
    older = create_sos_report(db, 1.0, 1.0, citizen.id, dispatcher)
    newer = create_sos_report(db, 2.0, 2.0, citizen.id, dispatcher)
    older.created_at = minutes(0)
    newer.created_at = minutes(5)
    db.commit()

    assert [s.id for s in list_sos_reports(db)] == [newer.id, older.id]
    assert [s.id for s in list_sos_reports(db, limit=1)] == [newer.id]
    assert get_sos_report(db, older.id).id == older.id
    with pytest.raises(NotFound) as exc:
        get_sos_report(db, 404)
    assert str(exc.value) == "SOS report 404 not found"


# ---- HTTP ----


def test_sos_api_notifies_admins_then_staff(client, sink, make_user, auth, minutes):
    citizen = make_user()
    admins = [make_user(UserRole.ADMIN, created_at=minutes(i)) for i in (3, 1)]
    staff = [make_user(UserRole.STAFF, created_at=minutes(i)) for i in (0, 2, 4)]

    r = client.post("/sos", headers=auth(citizen), json={"lat": 10.8, "lng": 106.7})

    assert r.status_code == 201
    body = r.json()
    assert body["user_id"] == citizen.id
    assert [u.id for u, _ in sink.sent] == [admins[1].id, admins[0].id, staff[0].id, staff[1].id, staff[2].id]
    assert {p["sourceId"] for _, p in sink.sent} == {body["id"]}


def test_sos_api_survives_failing_recipient(client, sink, make_user, auth):
    citizen = make_user()
    admin = make_user(UserRole.ADMIN)
    staff = make_user(UserRole.STAFF)
    sink.fail_for = {admin.id}

    r = client.post("/sos", headers=auth(citizen), json={"lat": 1.0, "lng": 1.0})

    assert r.status_code == 201
    assert [u.id for u, _ in sink.sent] == [staff.id]


def test_sos_api_validation_and_auth(client, make_user, auth):
    citizen = make_user()
    assert client.post("/sos", headers=auth(citizen), json={"lat": 95, "lng": 0}).status_code == 422
    assert client.post("/sos", json={"lat": 1, "lng": 1}).status_code == 401


def test_sos_listing_is_admin_only(client, make_user, auth):
    citizen = make_user()
    admin = make_user(UserRole.ADMIN)
    created = client.post("/sos", headers=auth(citizen), json={"lat": 1.0, "lng": 1.0}).json()

    assert client.get("/sos", headers=auth(citizen)).status_code == 403
    r = client.get("/sos", headers=auth(admin))
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [created["id"]]
    assert client.get(f"/sos/{created['id']}", headers=auth(admin)).json()["lat"] == 1.0
    assert client.get("/sos/999", headers=auth(admin)).status_code == 404


def test_websocket_rejects_bad_tokens(client, make_user, auth):
    from starlette.websockets import WebSocketDisconnect

    citizen = make_user()
    token = auth(citizen)["Authorization"].split()[1]

    for url in ("/ws", "/ws?token=garbage", f"/ws?token={token}"):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(url) as ws:
                ws.receive_text()


def test_websocket_ping(client, make_user, auth):
    staff = make_user(UserRole.STAFF)
    token = auth(staff)["Authorization"].split()[1]

    with client.websocket_connect(f"/ws?token={token}") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong", "data": None}


def test_sos_pushed_to_dashboard_socket(client, make_user, auth):
    from civicdesk.core.deps import get_notification_sink
    from civicdesk.main import app
    from civicdesk.services.notification_sinks import WebSocketSink

    citizen = make_user()
    admin = make_user(UserRole.ADMIN)
    app.dependency_overrides[get_notification_sink] = lambda: WebSocketSink()
    token = auth(admin)["Authorization"].split()[1]

    with client.websocket_connect(f"/ws?token={token}") as ws:
        created = client.post("/sos", headers=auth(citizen), json={"lat": 3.0, "lng": 4.0}).json()
        message = ws.receive_json()

    assert message["event"] == "sos.created"
    assert message["data"]["sourceId"] == created["id"]
    assert message["data"]["priority"] == "high"
