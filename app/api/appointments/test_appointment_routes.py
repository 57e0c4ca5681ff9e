# app/api/appointments/test_appointment_routes.py
from unittest.mock import patch

from app.models.appointment import AppointmentStatus
from app.services.email_service import EmailDeliveryError

BOOKING = {
    "owner_name": "Ana Cruz",
    "pet_name": "Mochi",
    "email": "ana@example.com",
    "phone": "09170000000",
    "service": "Grooming",
    "date": "2026-11-02",
    "time_slot": "Morning",
    "grooming_package": "full",
    "diagnosis": "Matted fur",
}


def test_create_appointment_sends_confirmation(app, client, auth_headers):
    email_service = app.services['email']
    with patch.object(email_service, 'send_appointment_confirmation', return_value={"id": "email-1"}) as send:
        resp = client.post('/api/appointments/', json=BOOKING, headers=auth_headers("user-1"))

    assert resp.status_code == 201
    body = resp.get_json()
    assert body['status'] == "Pending"
    assert body['time'] == "9:00 AM"
    assert body['service'] == "grooming"
    assert body['owner_id'] == "user-1"
    assert body['email_sent'] is True
    assert body['can_reschedule'] is True
    kwargs = send.call_args.kwargs
    assert kwargs['email'] == "ana@example.com"
    assert kwargs['service'] == "Grooming"
    assert kwargs['diagnosis'] == "Matted fur"


def test_email_failure_keeps_the_appointment(app, client):
    with patch.object(app.services['email'], 'send_appointment_confirmation',
                      side_effect=EmailDeliveryError("down")):
        resp = client.post('/api/appointments/', json=BOOKING)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body['email_sent'] is False
    assert 'email_warning' in body
    assert app.services['appointments'].get(body['appointment_id']) is not None


def test_create_without_confirmation_skips_email(app, client):
    with patch.object(app.services['email'], 'send_appointment_confirmation') as send:
        resp = client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False})
    assert resp.status_code == 201
    send.assert_not_called()


def test_create_validation_errors(client):
    resp = client.post('/api/appointments/', json={**BOOKING, "time_slot": "midnight", "email": "nope"})
    assert resp.status_code == 400
    details = resp.get_json()['details']
    assert 'time_slot' in details
    assert 'email' in details


def test_grooming_package_only_for_grooming(client):
    resp = client.post('/api/appointments/', json={**BOOKING, "service": "checkup"})
    assert resp.status_code == 400
    assert 'grooming_package' in resp.get_json()['details']


def test_list_by_email_for_guests(client):
    client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False})
    client.post('/api/appointments/', json={**BOOKING, "email": "other@example.com", "send_confirmation": False})

    resp = client.get('/api/appointments/?email=ANA@example.com')
    assert resp.status_code == 200
    assert [a['email'] for a in resp.get_json()] == ["ana@example.com"]


def test_list_requires_identity(client):
    resp = client.get('/api/appointments/')
    assert resp.status_code == 400


def test_list_mine_uses_token_identity(client, auth_headers):
    client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False}, headers=auth_headers("user-1"))
    client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False}, headers=auth_headers("user-2"))

    resp = client.get('/api/appointments/', headers=auth_headers("user-1"))
    assert [a['owner_id'] for a in resp.get_json()] == ["user-1"]


def test_get_other_users_appointment_is_not_found(client, auth_headers):
    created = client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False},
                          headers=auth_headers("user-1")).get_json()

    assert client.get(f"/api/appointments/{created['appointment_id']}", headers=auth_headers("user-1")).status_code == 200
    assert client.get(f"/api/appointments/{created['appointment_id']}", headers=auth_headers("user-2")).status_code == 404


def test_reschedule_route(app, client, auth_headers):
    headers = auth_headers("user-1")
    created = client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False},
                          headers=headers).get_json()
    url = f"/api/appointments/{created['appointment_id']}/reschedule"

    resp = client.patch(url, json={"date": "2026-11-20", "time_slot": "evening"}, headers=headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['status'] == "Rescheduled"
    assert body['date'] == "2026-11-20"
    assert body['time'] == "5:00 PM"

    assert client.patch(url, json={"date": "2026-11-21", "time_slot": "morning"},
                        headers=auth_headers("user-2")).status_code == 403

    app.services['appointments'].update_status(created['appointment_id'], AppointmentStatus.CANCELLED)
    resp = client.patch(url, json={"date": "2026-11-22", "time_slot": "morning"}, headers=headers)
    assert resp.status_code == 409
    assert resp.get_json()['error_code'] == "INVALID_STATUS_TRANSITION"


def test_reschedule_missing_appointment(client, auth_headers):
    resp = client.patch('/api/appointments/nope/reschedule', json={"date": "2026-11-20", "time_slot": "evening"},
                        headers=auth_headers("user-1"))
    assert resp.status_code == 404


def test_guest_booking_is_only_visible_to_matching_profile_email(app, client, auth_headers):
    created = client.post('/api/appointments/', json={**BOOKING, "send_confirmation": False}).get_json()
    app.services['profiles'].ensure_profile("user-1", "Ana", "ANA@example.com")
    url = f"/api/appointments/{created['appointment_id']}"
    move = {"date": "2026-11-20", "time_slot": "evening"}

    assert client.get(url, headers=auth_headers("stranger")).status_code == 404
    assert client.patch(f"{url}/reschedule", json=move, headers=auth_headers("stranger")).status_code == 403
    assert app.services['appointments'].get(created['appointment_id']).status is AppointmentStatus.PENDING

    assert client.get(url, headers=auth_headers("user-1")).status_code == 200
    resp = client.patch(f"{url}/reschedule", json=move, headers=auth_headers("user-1"))
    assert resp.status_code == 200
    assert resp.get_json()['status'] == "Rescheduled"
