from datetime import date, time, timedelta

import pytest

from jarimae.config import get_settings
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.store import Store, StoreStatus
from jarimae.models.user import UserRole

from conftest import login, next_weekday

WEDNESDAY = 3
MONDAY = 1


def week_payload(closed=(), open_time="11:00", close_time="21:00"):
    return [
        {"day_of_week": d, "open_time": open_time, "close_time": close_time, "is_closed": d in closed}
        for d in range(7)
    ]


def store_payload(**overrides):
    data = {
        "name": "Seoul Table",
        "phone": "02-555-1234",
        "address": "12 Gangnam-daero, Seoul",
        "cuisine_type": "KOREAN",
        "capacity": 30,
        "average_meal_duration": 90,
        "business_hours": week_payload(),
    }
    data.update(overrides)
    return data


def booking_payload(store_id, day, at="18:00", party_size=2, **overrides):
    data = {
        "store_id": store_id,
        "reservation_date": day.isoformat(),
        "reservation_time": at,
        "party_size": party_size,
        "contact_name": "Kim Minji",
        "contact_phone": "010-1234-5678",
    }
    data.update(overrides)
    return data


@pytest.fixture
def customer(make_user):
    return make_user(UserRole.CUSTOMER)


@pytest.fixture
def customer_headers(client, customer):
    return login(client, customer.email)


class TestAuth:
    def test_register_login_me(self, client):
        response = client.post("/api/auth/register", json={
            "email": "owner@example.com",
            "password": "supersecret",
            "name": "Store Owner",
            "role": "OWNER",
        })
        assert response.status_code == 201
        assert response.json()["role"] == "OWNER"

        headers = login(client, "owner@example.com", "supersecret")
        me = client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["email"] == "owner@example.com"

    def test_duplicate_email(self, client, customer):
        response = client.post("/api/auth/register", json={
            "email": customer.email, "password": "supersecret", "name": "Someone",
        })
        assert response.status_code == 400

    def test_cannot_self_register_admin(self, client):
        response = client.post("/api/auth/register", json={
            "email": "boss@example.com", "password": "supersecret", "name": "Boss", "role": "ADMIN",
        })
        assert response.status_code == 422

    def test_wrong_password(self, client, customer):
        response = client.post("/api/auth/login", json={"email": customer.email, "password": "not-it"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code == 401


class TestStores:
    def test_create_store_awaits_approval(self, client, make_user):
        owner = make_user(UserRole.OWNER)
        response = client.post("/api/stores/", json=store_payload(), headers=login(client, owner.email))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["owner_id"] == owner.id
        assert len(body["business_hours"]) == 7
        assert body["business_hours"][0]["open_time"] == "11:00"

        listed = client.get("/api/stores/").json()
        assert body["id"] not in [s["id"] for s in listed]

    def test_admin_activates_store(self, client, make_user):
        owner = make_user(UserRole.OWNER)
        admin = make_user(UserRole.ADMIN)
        store_id = client.post("/api/stores/", json=store_payload(), headers=login(client, owner.email)).json()["id"]

        forbidden = client.patch(f"/api/stores/{store_id}/status", json={"status": "ACTIVE"}, headers=login(client, owner.email))
        assert forbidden.status_code == 403

        response = client.patch(f"/api/stores/{store_id}/status", json={"status": "ACTIVE"}, headers=login(client, admin.email))
        assert response.status_code == 200
        assert response.json()["status"] == "ACTIVE"
        assert store_id in [s["id"] for s in client.get("/api/stores/").json()]

    def test_incomplete_week_rejected(self, client, make_user):
        owner = make_user(UserRole.OWNER)
        payload = store_payload(business_hours=week_payload()[:6])
        response = client.post("/api/stores/", json=payload, headers=login(client, owner.email))
        assert response.status_code == 422

    def test_overnight_hours_rejected(self, client, make_user):
        owner = make_user(UserRole.OWNER)
        payload = store_payload(business_hours=week_payload(open_time="18:00", close_time="02:00"))
        response = client.post("/api/stores/", json=payload, headers=login(client, owner.email))
        assert response.status_code == 422

    def test_customer_cannot_create_store(self, client, customer_headers):
        response = client.post("/api/stores/", json=store_payload(), headers=customer_headers)
        assert response.status_code == 403

    def test_business_hours_replace_whole_week(self, client, make_store):
        store = make_store()
        headers = login(client, store.owner.email)

        response = client.patch(
            f"/api/stores/{store.id}",
            json={"business_hours": week_payload(closed=(0,), open_time="12:00", close_time="20:00")},
            headers=headers,
        )
        assert response.status_code == 200

        hours = client.get(f"/api/stores/{store.id}/business-hours").json()
        assert len(hours) == 7
        assert hours[0]["is_closed"] is True
        assert all(h["open_time"] == "12:00" and h["close_time"] == "20:00" for h in hours)

    def test_other_owner_cannot_update(self, client, make_store, make_user):
        store = make_store()
        intruder = make_user(UserRole.OWNER)
        response = client.patch(f"/api/stores/{store.id}", json={"capacity": 5}, headers=login(client, intruder.email))
        assert response.status_code == 403

    def test_unknown_store(self, client):
        assert client.get("/api/stores/4242").status_code == 404


class TestAvailability:
    def test_slots_for_open_day(self, client, make_store, add_reservation):
        store = make_store(capacity=10, open_time=time(17, 0), close_time=time(22, 0))
        day = next_weekday(WEDNESDAY)
        add_reservation(store, day, time(18, 0), 8)

        response = client.get("/api/reservations/availability", params={
            "store_id": store.id,
            "reservation_date": day.isoformat(),
            "party_size": 3,
            "preferred_time": "18:30",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["business_hours"]["open_time"] == "17:00"
        assert body["slots"][0]["time"] == "17:00"
        assert body["slots"][-1]["time"] == "20:30"
        assert {"time": "18:30", "available": False, "remaining_capacity": 2} in body["slots"]
        assert body["preferred_time"]["available"] is False
        assert body["preferred_time"]["reason"] == "TIME_SLOT_UNAVAILABLE"

    def test_post_body(self, client, make_store):
        store = make_store()
        day = next_weekday(WEDNESDAY)
        response = client.post("/api/reservations/availability", json={
            "store_id": store.id, "reservation_date": day.isoformat(), "party_size": 2,
        })
        assert response.status_code == 200
        assert response.json()["available"] is True

    def test_closed_day(self, client, make_store):
        store = make_store(closed_days=(MONDAY,))
        response = client.get("/api/reservations/availability", params={
            "store_id": store.id, "reservation_date": next_weekday(MONDAY).isoformat(), "party_size": 2,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["available"] is False
        assert body["slots"] == []
        assert body["business_hours"] is None

    def test_party_larger_than_store(self, client, make_store):
        store = make_store(capacity=4)
        response = client.get("/api/reservations/availability", params={
            "store_id": store.id, "reservation_date": next_weekday(WEDNESDAY).isoformat(), "party_size": 6,
        })
        assert response.status_code == 200
        assert response.json()["reason"] == "PARTY_SIZE_EXCEEDS_CAPACITY"

    def test_unknown_store(self, client):
        response = client.get("/api/reservations/availability", params={
            "store_id": 4242, "reservation_date": next_weekday(WEDNESDAY).isoformat(), "party_size": 2,
        })
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "STORE_NOT_FOUND"

    def test_inactive_store(self, client, make_store):
        store = make_store(status=StoreStatus.SUSPENDED)
        response = client.get("/api/reservations/availability", params={
            "store_id": store.id, "reservation_date": next_weekday(WEDNESDAY).isoformat(), "party_size": 2,
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "STORE_INACTIVE"

    def test_bad_preferred_time(self, client, make_store):
        store = make_store()
        response = client.get("/api/reservations/availability", params={
            "store_id": store.id,
            "reservation_date": next_weekday(WEDNESDAY).isoformat(),
            "party_size": 2,
            "preferred_time": "7pm",
        })
        assert response.status_code == 422

    def test_past_date(self, client, make_store):
        store = make_store()
        response = client.get("/api/reservations/availability", params={
            "store_id": store.id,
            "reservation_date": (date.today() - timedelta(days=1)).isoformat(),
            "party_size": 2,
        })
        assert response.status_code == 422


class TestBooking:
    def test_create_reservation(self, client, make_store, customer, customer_headers):
        store = make_store()
        day = next_weekday(WEDNESDAY)
        response = client.post("/api/reservations/", json=booking_payload(store.id, day), headers=customer_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["reservation_time"] == "18:00"
        assert body["reservation_date"] == day.isoformat()
        assert body["estimated_duration"] == 90
        assert body["customer_id"] == customer.id
        assert body["store"]["name"] == store.name

    def test_duplicate_time_conflicts(self, client, make_store, customer_headers):
        store = make_store(capacity=50)
        day = next_weekday(WEDNESDAY)
        first = client.post("/api/reservations/", json=booking_payload(store.id, day), headers=customer_headers)
        assert first.status_code == 201

        second = client.post("/api/reservations/", json=booking_payload(store.id, day), headers=customer_headers)
        assert second.status_code == 409
        assert second.json()["detail"]["code"] == "TIME_SLOT_UNAVAILABLE"

    def test_closed_day_rejected(self, client, make_store, customer_headers):
        store = make_store(closed_days=(MONDAY,))
        response = client.post(
            "/api/reservations/", json=booking_payload(store.id, next_weekday(MONDAY)), headers=customer_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "STORE_CLOSED"

    def test_owner_cannot_book(self, client, make_store):
        store = make_store()
        response = client.post(
            "/api/reservations/",
            json=booking_payload(store.id, next_weekday(WEDNESDAY)),
            headers=login(client, store.owner.email),
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("overrides", [
        {"contact_phone": "02-123-4567"},
        {"contact_name": "K"},
        {"reservation_time": "6pm"},
        {"party_size": 0},
        {"estimated_duration": 15},
    ])
    def test_invalid_payload(self, client, make_store, customer_headers, overrides):
        store = make_store()
        payload = booking_payload(store.id, next_weekday(WEDNESDAY), **overrides)
        response = client.post("/api/reservations/", json=payload, headers=customer_headers)
        assert response.status_code == 422

    def test_owner_is_notified(self, client, make_store, customer_headers):
        store = make_store()
        client.post("/api/reservations/", json=booking_payload(store.id, next_weekday(WEDNESDAY)), headers=customer_headers)

        owner_headers = login(client, store.owner.email)
        notifications = client.get("/api/notifications/", headers=owner_headers).json()
        assert len(notifications) == 1
        assert notifications[0]["type"] == "reservation_created"

        marked = client.patch(f"/api/notifications/{notifications[0]['id']}", json={"is_read": True}, headers=owner_headers)
        assert marked.json()["is_read"] is True
        assert marked.json()["read_at"] is not None
        unmarked = client.patch(f"/api/notifications/{notifications[0]['id']}", json={"is_read": False}, headers=owner_headers)
        assert unmarked.json()["read_at"] is None
        client.patch(f"/api/notifications/{notifications[0]['id']}", json={"is_read": True}, headers=owner_headers)
        assert client.get("/api/notifications/", params={"unread_only": True}, headers=owner_headers).json() == []


class TestReservationLifecycle:
    @pytest.fixture
    def booked(self, client, make_store, customer_headers):
        store = make_store()
        day = next_weekday(WEDNESDAY)
        response = client.post("/api/reservations/", json=booking_payload(store.id, day), headers=customer_headers)
        return store, day, response.json()

    def test_listing_is_scoped_by_role(self, client, booked, customer_headers, make_user):
        store, _, reservation = booked

        mine = client.get("/api/reservations/", headers=customer_headers).json()
        assert [r["id"] for r in mine["reservations"]] == [reservation["id"]]
        assert mine["total"] == 1

        owners = client.get("/api/reservations/", headers=login(client, store.owner.email)).json()
        assert owners["total"] == 1

        stranger = make_user(UserRole.CUSTOMER)
        assert client.get("/api/reservations/", headers=login(client, stranger.email)).json()["total"] == 0
        assert client.get(f"/api/reservations/{reservation['id']}", headers=login(client, stranger.email)).status_code == 403

    def test_status_filter(self, client, booked, customer_headers):
        params = {"status": "CONFIRMED"}
        assert client.get("/api/reservations/", params=params, headers=customer_headers).json()["total"] == 0

    def test_owner_confirms_and_customer_is_notified(self, client, booked, customer_headers):
        store, _, reservation = booked
        owner_headers = login(client, store.owner.email)

        response = client.patch(
            f"/api/reservations/{reservation['id']}/status", json={"status": "CONFIRMED"}, headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"

        notifications = client.get("/api/notifications/", headers=customer_headers).json()
        assert [n["type"] for n in notifications] == ["reservation_status_changed"]

    def test_invalid_transition(self, client, booked):
        store, _, reservation = booked
        owner_headers = login(client, store.owner.email)

        response = client.patch(
            f"/api/reservations/{reservation['id']}/status", json={"status": "COMPLETED"}, headers=owner_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"

    def test_customer_can_only_cancel(self, client, booked, customer_headers):
        _, _, reservation = booked
        url = f"/api/reservations/{reservation['id']}/status"

        assert client.patch(url, json={"status": "CONFIRMED"}, headers=customer_headers).status_code == 403

        response = client.patch(url, json={"status": "CANCELLED", "cancellation_reason": "Plans changed"}, headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["cancellation_reason"] == "Plans changed"

    def test_cancelled_time_can_be_rebooked(self, client, booked, customer_headers):
        store, day, reservation = booked
        client.patch(
            f"/api/reservations/{reservation['id']}/status", json={"status": "CANCELLED"}, headers=customer_headers
        )
        response = client.post("/api/reservations/", json=booking_payload(store.id, day), headers=customer_headers)
        assert response.status_code == 201

    def test_reschedule(self, client, booked, customer_headers):
        _, _, reservation = booked
        response = client.put(
            f"/api/reservations/{reservation['id']}",
            json={"reservation_time": "19:30", "party_size": 4},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["reservation_time"] == "19:30"
        assert response.json()["party_size"] == 4

    def test_reschedule_into_taken_time(self, client, booked, customer_headers, add_reservation):
        store, day, reservation = booked
        add_reservation(store, day, time(20, 0), 2)

        response = client.put(
            f"/api/reservations/{reservation['id']}", json={"reservation_time": "20:00"}, headers=customer_headers
        )
        assert response.status_code == 409

    def test_cancelled_reservation_is_not_modifiable(self, client, booked, customer_headers):
        _, _, reservation = booked
        client.patch(
            f"/api/reservations/{reservation['id']}/status", json={"status": "CANCELLED"}, headers=customer_headers
        )
        response = client.put(
            f"/api/reservations/{reservation['id']}", json={"party_size": 3}, headers=customer_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "RESERVATION_NOT_MODIFIABLE"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestStoreDeletion:
    def test_refused_while_upcoming_reservations_exist(self, client, db, make_store, add_reservation):
        store = make_store()
        reservation = add_reservation(store, next_weekday(WEDNESDAY), time(18, 0), 2)

        response = client.delete(f"/api/stores/{store.id}", headers=login(client, store.owner.email))
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "HAS_ACTIVE_RESERVATIONS"

        assert client.get(f"/api/stores/{store.id}").status_code == 200
        db.expire_all()
        assert db.get(Reservation, reservation.id).status == ReservationStatus.PENDING

    def test_confirmed_reservation_also_blocks(self, client, make_store, add_reservation):
        store = make_store()
        add_reservation(store, next_weekday(WEDNESDAY), time(18, 0), 2, status=ReservationStatus.CONFIRMED)

        response = client.delete(f"/api/stores/{store.id}", headers=login(client, store.owner.email))
        assert response.status_code == 400

    def test_soft_deletes_when_only_past_or_finished_bookings(self, client, db, make_store, add_reservation):
        store = make_store()
        past = add_reservation(store, date.today() - timedelta(days=3), time(18, 0), 2)
        add_reservation(store, next_weekday(WEDNESDAY), time(19, 0), 2, status=ReservationStatus.CANCELLED)

        response = client.delete(f"/api/stores/{store.id}", headers=login(client, store.owner.email))
        assert response.status_code == 204

        db.expire_all()
        assert db.get(Store, store.id).status == StoreStatus.DELETED
        assert db.get(Reservation, past.id).store_id == store.id

        assert client.get(f"/api/stores/{store.id}").status_code == 404
        assert store.id not in [s["id"] for s in client.get("/api/stores/").json()]
        availability = client.get("/api/reservations/availability", params={
            "store_id": store.id, "reservation_date": next_weekday(WEDNESDAY).isoformat(), "party_size": 2,
        })
        assert availability.status_code == 404

    def test_status_endpoint_cannot_delete(self, client, make_store, make_user):
        store = make_store()
        admin = make_user(UserRole.ADMIN)
        response = client.patch(
            f"/api/stores/{store.id}/status", json={"status": "DELETED"}, headers=login(client, admin.email)
        )
        assert response.status_code == 422


class TestStoreDefaults:
    def test_capacity_and_duration_default_from_settings(self, client, make_user):
        owner = make_user(UserRole.OWNER)
        payload = store_payload()
        del payload["capacity"]
        del payload["average_meal_duration"]

        body = client.post("/api/stores/", json=payload, headers=login(client, owner.email)).json()
        settings = get_settings()
        assert body["capacity"] == settings.default_capacity
        assert body["average_meal_duration"] == settings.default_meal_duration


class TestReservationSearch:
    @pytest.fixture
    def bookings(self, make_store, make_user, add_reservation):
        store = make_store(capacity=50)
        kim = make_user(UserRole.CUSTOMER)
        lee = make_user(UserRole.CUSTOMER)
        day = next_weekday(WEDNESDAY)
        add_reservation(store, day, time(18, 0), 4, customer=kim, contact_name="Kim Minji", contact_phone="010-1234-5678")
        add_reservation(store, day, time(12, 0), 2, customer=lee, contact_name="Lee Junho", contact_phone="010-9999-0000")
        add_reservation(store, day + timedelta(days=7), time(19, 0), 6, customer=kim, contact_name="KIM Minji", contact_phone="010-1234-5678")
        return store, kim, lee

    def test_contact_name_is_case_insensitive(self, client, bookings):
        store, _, _ = bookings
        body = client.get(
            "/api/reservations/", params={"contact_name": "kim"}, headers=login(client, store.owner.email)
        ).json()
        assert body["total"] == 2
        assert {r["contact_name"] for r in body["reservations"]} == {"Kim Minji", "KIM Minji"}

    def test_contact_phone_partial_match(self, client, bookings):
        store, _, _ = bookings
        body = client.get(
            "/api/reservations/", params={"contact_phone": "9999"}, headers=login(client, store.owner.email)
        ).json()
        assert [r["contact_name"] for r in body["reservations"]] == ["Lee Junho"]

    def test_owner_filters_by_customer(self, client, bookings):
        store, kim, _ = bookings
        body = client.get(
            "/api/reservations/", params={"customer_id": kim.id}, headers=login(client, store.owner.email)
        ).json()
        assert body["total"] == 2
        assert all(r["customer_id"] == kim.id for r in body["reservations"])

    def test_customer_cannot_widen_with_customer_id(self, client, bookings):
        _, kim, lee = bookings
        body = client.get(
            "/api/reservations/", params={"customer_id": kim.id}, headers=login(client, lee.email)
        ).json()
        assert body["total"] == 1
        assert body["reservations"][0]["customer_id"] == lee.id

    def test_sort_by_party_size_ascending(self, client, bookings):
        store, _, _ = bookings
        body = client.get(
            "/api/reservations/",
            params={"sort_by": "party_size", "sort_order": "asc"},
            headers=login(client, store.owner.email),
        ).json()
        assert [r["party_size"] for r in body["reservations"]] == [2, 4, 6]

    def test_default_order_is_newest_date_first(self, client, bookings):
        store, _, _ = bookings
        body = client.get("/api/reservations/", headers=login(client, store.owner.email)).json()
        assert [r["reservation_time"] for r in body["reservations"]] == ["19:00", "18:00", "12:00"]

    def test_ascending_date_breaks_ties_on_time(self, client, bookings):
        store, _, _ = bookings
        body = client.get(
            "/api/reservations/", params={"sort_order": "asc"}, headers=login(client, store.owner.email)
        ).json()
        assert [r["reservation_time"] for r in body["reservations"]] == ["12:00", "18:00", "19:00"]

    def test_unknown_sort_field(self, client, bookings):
        store, _, _ = bookings
        response = client.get(
            "/api/reservations/", params={"sort_by": "contact_phone"}, headers=login(client, store.owner.email)
        )
        assert response.status_code == 422


class TestProfile:
    def test_profile_includes_stats(self, client, make_store, customer, add_reservation):
        store = make_store()
        add_reservation(store, next_weekday(WEDNESDAY), time(18, 0), 2, customer=customer)
        add_reservation(store, date.today() - timedelta(days=2), time(18, 0), 2,
                        status=ReservationStatus.COMPLETED, customer=customer)

        body = client.get("/api/users/profile", headers=login(client, customer.email)).json()
        assert body["email"] == customer.email
        assert body["stats"] == {"total_reservations": 2, "completed_reservations": 1, "unread_notifications": 0}

    def test_update_name_and_phone(self, client, customer, customer_headers):
        response = client.put(
            "/api/users/profile", json={"name": "Kim Minji", "phone": "010-2222-3333"}, headers=customer_headers
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Kim Minji"
        assert response.json()["phone"] == "010-2222-3333"
        assert client.get("/api/auth/me", headers=customer_headers).json()["name"] == "Kim Minji"

    def test_role_is_not_writable(self, client, customer_headers):
        response = client.put("/api/users/profile", json={"role": "ADMIN"}, headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "CUSTOMER"

    def test_bad_phone(self, client, customer_headers):
        response = client.put("/api/users/profile", json={"phone": "12345"}, headers=customer_headers)
        assert response.status_code == 422
