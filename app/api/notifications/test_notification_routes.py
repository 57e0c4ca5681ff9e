# app/api/notifications/test_notification_routes.py
from datetime import timedelta

from app.models.notification import Notification, NotificationType
from app.utils.datetime_utils import DateTimeUtils


def add_pet(app, owner_id="user-1", name="Mochi", months_old=12):
    birth = DateTimeUtils.today() - timedelta(days=30 * months_old + 1)
    return app.services['pets'].add_pet(owner_id, {'name': name, 'species': "dog", 'birth_date': birth,
                                                   'gender': "female"})


def test_notifications_for_pet_owner(app, client, auth_headers):
    add_pet(app)

    resp = client.get('/api/notifications/', headers=auth_headers("user-1"))

    assert resp.status_code == 200
    types = sorted(n['type'] for n in resp.get_json())
    assert types == ["PROMOTION", "VACCINATION_DUE"]


def test_guest_booking_with_profile_email_counts_as_vaccination(app, client, auth_headers):
    app.services['profiles'].ensure_profile("user-1", "Ana", "ana@example.com")
    add_pet(app)
    app.services['appointments'].create({
        'owner_name': "Ana", 'pet_name': "mochi", 'email': "ANA@example.com", 'phone': "0917",
        'service': "vaccination", 'date': DateTimeUtils.today() - timedelta(days=10), 'time_slot': "morning",
    })

    notifications = client.get('/api/notifications/', headers=auth_headers("user-1")).get_json()

    assert [n['type'] for n in notifications] == ["PROMOTION"]


def test_user_without_pets_gets_nothing(client, auth_headers):
    assert client.get('/api/notifications/', headers=auth_headers("user-9")).get_json() == []


def test_inbox_drains_once(app, client, auth_headers):
    app.services['notification_inbox'].push("user-1", [
        Notification(notification_id="promotion-grooming", type=NotificationType.PROMOTION,
                     title="Special Offer", message="Get 10% off on grooming services this month!")
    ])
    headers = auth_headers("user-1")

    first = client.get('/api/notifications/inbox', headers=headers).get_json()
    assert [n['notification_id'] for n in first] == ["promotion-grooming"]
    assert client.get('/api/notifications/inbox', headers=headers).get_json() == []


def test_poller_snapshot_groups_by_pet_owner(app):
    add_pet(app, "user-1")
    add_pet(app, "user-2", name="Kiko", months_old=2)

    delivered = app.services['notification_poller'].poll_once()

    # user-1: 접종 + 프로모션, user-2: 프로모션
    assert delivered == 3
    assert app.services['notification_poller'].poll_once() == 0
