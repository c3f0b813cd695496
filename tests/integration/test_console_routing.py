import pytest
from unittest.mock import patch, AsyncMock
from fastapi.testclient import TestClient
from faker import Faker

# The app is imported here, before any patching
from services.console.app.main import app
from services.console.app.config.settings import settings
from services.console.app.utils.http_client import MicroserviceError

fake = Faker()

USERS = "services.console.app.microservices.users"
ANNOUNCEMENTS = "services.console.app.microservices.announcements"
EVENTS = "services.console.app.microservices.events"


@pytest.fixture
def client():
    """
    Console client with the app lifespan running and no search debounce.
    """
    delay = settings.SEARCH_DEBOUNCE_SECONDS
    settings.SEARCH_DEBOUNCE_SECONDS = 0
    with TestClient(app) as test_client:
        yield test_client
    settings.SEARCH_DEBOUNCE_SECONDS = delay


@pytest.fixture
def signed_in(client):
    response = client.post(
        "/login",
        data={"user_id": "admin", "access_token": "token-1", "name": "Admin"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/members"
    return client


@pytest.fixture
def mock_microservices():
    """
    Fixture to mock every microservice call the console makes.
    """
    with patch(f"{USERS}.search_users", new_callable=AsyncMock) as search_users, \
         patch(f"{USERS}.update_users_status", new_callable=AsyncMock) as update_users_status, \
         patch(f"{ANNOUNCEMENTS}.search_announcements", new_callable=AsyncMock) as search_announcements, \
         patch(f"{ANNOUNCEMENTS}.get_announcement_by_uid", new_callable=AsyncMock) as get_announcement, \
         patch(f"{ANNOUNCEMENTS}.create_announcement", new_callable=AsyncMock) as create_announcement, \
         patch(f"{ANNOUNCEMENTS}.update_announcement_by_uid", new_callable=AsyncMock) as update_announcement, \
         patch(f"{EVENTS}.search_events", new_callable=AsyncMock) as search_events:

        search_users.return_value = {"data": []}
        search_announcements.return_value = {"data": []}
        search_events.return_value = {"data": []}
        yield {
            "search_users": search_users,
            "update_users_status": update_users_status,
            "search_announcements": search_announcements,
            "get_announcement": get_announcement,
            "create_announcement": create_announcement,
            "update_announcement": update_announcement,
            "search_events": search_events,
        }


def test_members_page_redirects_without_session(client, mock_microservices):
    """
    Test that an anonymous visit is sent to the login page before any search runs.
    """
    response = client.get("/members", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"].startswith("/login")
    mock_microservices["search_users"].assert_not_called()


def test_htmx_requests_are_told_to_redirect(client, mock_microservices):
    response = client.get("/members/results", headers={"HX-Request": "true"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["HX-Redirect"].startswith("/login")


def test_members_page_renders_a_card_per_member(signed_in, mock_microservices):
    first, last = "Ada", "Lovelace"
    login = fake.user_name()
    mock_microservices["search_users"].return_value = {
        "data": [
            {"uid": "m1", "isActive": True, "firstName": first, "lastName": last},
            {"uid": "m2", "isActive": False, "login": login},
        ]
    }

    response = signed_in.get("/members")

    assert response.status_code == 200
    assert f"{first} {last}" in response.text
    assert login in response.text
    assert "Restore" in response.text
    mock_microservices["search_users"].assert_awaited_once()
    assert mock_microservices["search_users"].call_args.args[1] == "token-1"


def test_results_follow_search_and_page_size(signed_in, mock_microservices):
    response = signed_in.get("/members/results", params={"search": "ada", "limit": 25})

    assert response.status_code == 200
    args = mock_microservices["search_users"].call_args.args
    assert args[2] == {"filters": {"search": "ada"}, "limit": 25}
    assert args[3] == 25


def test_toggle_status_asks_for_refresh(signed_in, mock_microservices):
    signed_in.get("/members")

    response = signed_in.post("/members/m1/status", data={"is_active": "true"})

    assert response.status_code == 204
    assert response.headers["HX-Trigger"] == "users:refresh"
    mock_microservices["update_users_status"].assert_awaited_once()
    assert mock_microservices["update_users_status"].call_args.args[2:] == (False, {"uids": ["m1"]})

    signed_in.get("/members/results")
    assert mock_microservices["search_users"].await_count == 2


def test_announcement_edit_flow(signed_in, mock_microservices):
    """
    Test that editing loads the announcement, saves it by uid and closes the drawer.
    """
    mock_microservices["get_announcement"].return_value = {
        "data": {"uid": "a1", "title": "AGM", "details": "<p>Annual meeting</p>", "poster": {"uid": "p1"}, "isPublished": True}
    }

    opened = signed_in.get("/announcements/drawer", params={"uid": "a1", "edit": "true"})

    assert opened.status_code == 200
    assert "Edit Announcement" in opened.text
    assert 'value="AGM"' in opened.text
    assert mock_microservices["get_announcement"].call_args.args[2] == "a1"

    saved = signed_in.post(
        "/announcements/drawer/submit",
        data={"title": "AGM 2024", "details": "<p>Annual meeting</p>", "is_published": "on"},
    )

    assert saved.status_code == 200
    assert saved.headers["HX-Trigger"] == "announcements:refresh"
    assert "drawer-panel" not in saved.text
    args = mock_microservices["update_announcement"].call_args.args
    assert args[2] == "a1"
    assert args[3]["title"] == "AGM 2024"
    assert args[3]["isPublished"] is True
    assert args[3]["poster"].uid == "p1"


def test_missing_fields_are_reported_inline(signed_in, mock_microservices):
    signed_in.get("/announcements/drawer")

    response = signed_in.post("/announcements/drawer/submit", data={"title": "", "details": ""})

    assert response.status_code == 200
    assert response.text.count("Required") == 2
    assert "HX-Trigger" not in response.headers
    mock_microservices["create_announcement"].assert_not_called()


def test_backend_failure_keeps_drawer_open(signed_in, mock_microservices):
    mock_microservices["create_announcement"].side_effect = MicroserviceError("announcements-service", "unavailable", 503)
    signed_in.get("/announcements/drawer")

    response = signed_in.post("/announcements/drawer/submit", data={"title": "AGM", "details": "<p>Hi</p>"})

    assert response.status_code == 200
    assert "Could not save: unavailable" in response.text
    assert 'value="AGM"' in response.text


def test_poster_selection_previews_image(signed_in, mock_microservices):
    signed_in.get("/events/drawer")

    response = signed_in.post("/events/drawer/poster", files={"poster": ("a.png", b"png-bytes", "image/png")})

    assert response.status_code == 200
    assert "data:image/png;base64," in response.text
    assert "Change Poster" in response.text


def test_non_image_poster_is_refused(signed_in, mock_microservices):
    signed_in.get("/events/drawer")

    response = signed_in.post("/events/drawer/poster", files={"poster": ("notes.txt", b"hello", "text/plain")})

    assert "Poster must be an image" in response.text
    assert "data:" not in response.text


def test_submitting_a_closed_drawer_conflicts(signed_in, mock_microservices):
    response = signed_in.post("/events/drawer/submit", data={"name": "Raid night"})

    assert response.status_code == 409


def test_search_failure_is_a_bad_gateway(signed_in, mock_microservices):
    mock_microservices["search_events"].side_effect = MicroserviceError("events-service", "down", 500)

    response = signed_in.get("/events/results", params={"search": "raid"})

    assert response.status_code == 502
    assert "events-service" in response.text


def test_logout_ends_the_session(signed_in, mock_microservices):
    response = signed_in.post("/logout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == settings.LOGIN_URL
    assert signed_in.get("/members", follow_redirects=False).status_code == 303


def test_copied_cookie_is_refused_after_logout(signed_in, mock_microservices):
    cookie = signed_in.cookies.get(settings.SESSION_COOKIE_NAME)
    signed_in.post("/logout", follow_redirects=False)

    signed_in.cookies.set(settings.SESSION_COOKIE_NAME, cookie)
    response = signed_in.get("/members", follow_redirects=False)

    assert response.status_code == 303
    mock_microservices["search_users"].assert_not_called()


def test_reloading_the_page_searches_again(signed_in, mock_microservices):
    signed_in.get("/members")
    signed_in.get("/members")

    assert mock_microservices["search_users"].await_count == 2
