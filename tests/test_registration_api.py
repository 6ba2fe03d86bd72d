import pytest
from fastapi.testclient import TestClient
from evently.main import app
from evently.routers.events import get_event_service
from evently.routers.registrations import get_analytics_service, get_registration_service
from evently.schemas.event import EventCreate
from evently.services.analytics_service import AnalyticsService
from evently.services.event_service import EventService
from evently.services.registration_service import RegistrationService
from tests.conftest import TEST_TABLE_NAME


@pytest.fixture
def event_service(dynamodb_resource):
    return EventService(dynamodb_resource, TEST_TABLE_NAME)


@pytest.fixture
def client(dynamodb_resource, event_service):
    """Create test client with overridden dependencies"""

    def get_test_registration_service():
        return RegistrationService(dynamodb_resource, TEST_TABLE_NAME)

    def get_test_analytics_service():
        return AnalyticsService(dynamodb_resource, TEST_TABLE_NAME)

    app.dependency_overrides[get_event_service] = lambda: event_service
    app.dependency_overrides[get_registration_service] = get_test_registration_service
    app.dependency_overrides[get_analytics_service] = get_test_analytics_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides = {}


@pytest.fixture
def event(event_service, event_data):
    return event_service.create_event(EventCreate(**event_data))


def registration_payload(event_id, **overrides):
    payload = {
        "eventId": event_id,
        "attendeeName": "Jane Doe",
        "attendeeEmail": "jane@mail.com",
        "attendeePhone": "+1-555-0100",
    }
    payload.update(overrides)
    return payload


def test_create_registration_api(client, event_service, event):
    response = client.post("/api/registrations", json=registration_payload(event.id))

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Registration successful!"
    assert data["registration"]["eventId"] == event.id
    assert data["registration"]["status"] == "confirmed"
    assert data["registration"]["ticketType"] == "Standard"

    assert event_service.get_event(event.id).currentAttendees == 1


def test_create_registration_missing_fields(client, event):
    payload = registration_payload(event.id)
    del payload["attendeePhone"]

    response = client.post("/api/registrations", json=payload)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "All fields are required: eventId, attendeeName, attendeeEmail, attendeePhone",
    }


def test_create_registration_unknown_event(client):
    response = client.post("/api/registrations", json=registration_payload("nope"))

    assert response.status_code == 404
    assert response.json()["message"] == "Event not found"


def test_duplicate_registration_conflict(client, event):
    """Same email in different case is the same attendee"""
    first = client.post(
        "/api/registrations",
        json=registration_payload(event.id, attendeeEmail="X@Y.com", attendeePhone="1"),
    )
    second = client.post(
        "/api/registrations",
        json=registration_payload(event.id, attendeeEmail="x@y.com", attendeePhone="2"),
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {
        "success": False,
        "message": "You are already registered for this event",
    }


def test_capacity_scenario_api(client, event_service, event_data):
    event = event_service.create_event(EventCreate(**{**event_data, "maxAttendees": 1}))
    a = registration_payload(event.id, attendeeEmail="a@mail.com", attendeePhone="1")
    b = registration_payload(event.id, attendeeEmail="b@mail.com", attendeePhone="2")

    created = client.post("/api/registrations", json=a)
    assert created.status_code == 201
    assert event_service.get_event(event.id).currentAttendees == 1

    full = client.post("/api/registrations", json=b)
    assert full.status_code == 400
    assert full.json()["message"] == "Event is fully booked"

    registration_id = created.json()["registration"]["id"]
    cancelled = client.put(
        f"/api/registrations/{registration_id}/status", json={"status": "cancelled"}
    )
    assert cancelled.status_code == 200
    assert event_service.get_event(event.id).currentAttendees == 0

    assert client.post("/api/registrations", json=b).status_code == 201


def test_update_status_api(client, event):
    created = client.post("/api/registrations", json=registration_payload(event.id)).json()
    registration_id = created["registration"]["id"]

    response = client.put(
        f"/api/registrations/{registration_id}/status", json={"status": "pending"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Registration status updated"
    assert data["registration"]["status"] == "pending"
    assert data["registration"]["event"]["id"] == event.id


def test_update_status_api_invalid_status(client, event):
    created = client.post("/api/registrations", json=registration_payload(event.id)).json()

    response = client.put(
        f"/api/registrations/{created['registration']['id']}/status",
        json={"status": "archived"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Invalid status. Must be: confirmed, pending, or cancelled"
    )


def test_update_status_api_unknown_registration(client):
    response = client.put(
        "/api/registrations/missing/status", json={"status": "confirmed"}
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Registration not found"


def test_user_registrations_api(client, event):
    client.post("/api/registrations", json=registration_payload(event.id))

    by_email = client.get("/api/registrations/user/JANE@mail.com", params={"type": "email"})
    by_phone = client.get("/api/registrations/user/+1-555-0100", params={"type": "phone"})
    default_type = client.get("/api/registrations/user/jane@mail.com")

    for response in (by_email, by_phone, default_type):
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["registrations"]) == 1
        assert data["registrations"][0]["event"]["title"] == event.title


def test_match_registrations_api(client, event):
    client.post("/api/registrations", json=registration_payload(event.id))

    response = client.get("/api/registrations/match/Jane@Mail.com")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["registrations"][0]["attendeeEmail"] == "jane@mail.com"


def test_event_registrations_api(client, event):
    first = client.post(
        "/api/registrations",
        json=registration_payload(event.id, attendeeEmail="a@mail.com", attendeePhone="1"),
    ).json()
    client.post(
        "/api/registrations",
        json=registration_payload(event.id, attendeeEmail="b@mail.com", attendeePhone="2"),
    )
    client.put(
        f"/api/registrations/{first['registration']['id']}/status",
        json={"status": "cancelled"},
    )

    everyone = client.get(f"/api/registrations/event/{event.id}").json()
    confirmed = client.get(
        f"/api/registrations/event/{event.id}", params={"status": "confirmed"}
    ).json()

    assert everyone["success"] is True
    assert everyone["count"] == 2
    assert confirmed["count"] == 1
    assert confirmed["registrations"][0]["attendeeEmail"] == "b@mail.com"


def test_analytics_api(client, event_service, event_data, event):
    music = event_service.create_event(
        EventCreate(**{**event_data, "category": "Music", "price": 50})
    )
    client.post("/api/registrations", json=registration_payload(event.id))
    client.post(
        "/api/registrations",
        json=registration_payload(music.id, attendeeEmail="b@mail.com", attendeePhone="2"),
    )
    cancelled = client.post(
        "/api/registrations",
        json=registration_payload(music.id, attendeeEmail="c@mail.com", attendeePhone="3"),
    ).json()
    client.put(
        f"/api/registrations/{cancelled['registration']['id']}/status",
        json={"status": "cancelled"},
    )

    response = client.get("/api/registrations/analytics")

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    assert analytics["totals"] == {
        "events": 2,
        "registrations": 2,
        "revenue": 349.0,
        "avgAttendance": 1,
    }
    assert len(analytics["monthlyData"]) == 12
    assert sum(m["registrations"] for m in analytics["monthlyData"]) == 2
    assert {c["name"]: c["value"] for c in analytics["categoryData"]} == {
        "Technology": 1,
        "Music": 1,
    }


def test_create_registration_accepts_trailing_slash(client, event):
    response = client.post(
        "/api/registrations/", json=registration_payload(event.id), follow_redirects=False
    )

    assert response.status_code == 201
    assert response.json()["registration"]["eventId"] == event.id


class BrokenRegistrationService:
    def _fail(self, *args, **kwargs):
        raise RuntimeError("table unavailable")

    create_registration = _fail
    update_status = _fail
    get_user_registrations = _fail
    match_registrations = _fail
    get_event_registrations = _fail


@pytest.mark.parametrize(
    "method, path, body, message",
    [
        ("post", "/api/registrations", registration_payload("e1"),
         "Failed to create registration. Please try again."),
        ("put", "/api/registrations/r1/status", {"status": "cancelled"},
         "Failed to update registration status"),
        ("get", "/api/registrations/user/jane@mail.com", None, "Failed to fetch registrations"),
        ("get", "/api/registrations/match/jane@mail.com", None, "Failed to match registrations"),
        ("get", "/api/registrations/event/e1", None, "Failed to fetch event registrations"),
    ],
)
def test_registration_storage_failure_returns_500(client, method, path, body, message):
    """Unexpected storage errors are logged and answered with a generic message"""
    app.dependency_overrides[get_registration_service] = BrokenRegistrationService

    kwargs = {"json": body} if body is not None else {}
    response = client.request(method.upper(), path, **kwargs)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": message}


def test_analytics_failure_returns_500(client):
    class BrokenAnalyticsService:
        def get_analytics(self):
            raise RuntimeError("table unavailable")

    app.dependency_overrides[get_analytics_service] = BrokenAnalyticsService

    response = client.get("/api/registrations/analytics")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to fetch analytics data"}
