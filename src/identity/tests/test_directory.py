import copy
import json

import httpx
import pytest

from src.config.settings import Settings
from src.events.errors import NotFoundError, UpstreamUnavailableError
from src.identity.directory import Auth0ProfileDirectory
from src.identity.dtos import Profile

CONFIG = Settings(
    AUTH0_DOMAIN="iris-test.eu.auth0.com",
    AUTH0_MANAGEMENT_CLIENT_ID="client-id",
    AUTH0_MANAGEMENT_CLIENT_SECRET="client-secret",
    PROFILE_PAGES=2,
)

AUTH0_USER = {
    "user_id": "auth0|1",
    "email": "one@example.com",
    "email_verified": True,
    "user_metadata": {"username": "TK-1"},
    "app_metadata": {"authorization": {"permissions": ["signup:dgevent"]}},
}


class FakeAuth0:
    def __init__(self, users=None):
        self.users = users or {}
        self.token_requests = 0
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth/token":
            self.token_requests += 1
            return httpx.Response(200, json={"access_token": "mgmt-token", "expires_in": 86400})

        assert request.headers["Authorization"] == "Bearer mgmt-token"
        self.requests.append(request)
        if request.url.path == "/api/v2/users":
            page = int(request.url.params["page"])
            users = list(self.users.values())
            return httpx.Response(200, json=users[page : page + 1])

        user_id = request.url.path.removeprefix("/api/v2/users/")
        if user_id not in self.users:
            return httpx.Response(404, json={"message": "not found"})
        if request.method == "PATCH":
            body = json.loads(request.content)
            self.users[user_id]["user_metadata"].update(body["user_metadata"])
        return httpx.Response(200, json=self.users[user_id])


def directory_for(handler):
    class MockClient(httpx.AsyncClient):
        def __init__(self, **kwargs):
            super().__init__(transport=httpx.MockTransport(handler), **kwargs)

    return Auth0ProfileDirectory(CONFIG, http_client_class=MockClient)


@pytest.fixture
def auth0():
    first = copy.deepcopy(AUTH0_USER)
    second = {**copy.deepcopy(AUTH0_USER), "user_id": "auth0|2", "email": "two@example.com"}
    return FakeAuth0({"auth0|1": first, "auth0|2": second})


async def test_get_profile(auth0):
    profile = await directory_for(auth0).get_profile("auth0|1")

    assert profile.user_id == "auth0|1"
    assert profile.email_verified
    assert profile.username == "TK-1"
    assert profile.permissions == frozenset({"signup:dgevent"})


async def test_management_token_is_reused(auth0):
    directory = directory_for(auth0)

    await directory.get_profile("auth0|1")
    await directory.get_profile("auth0|2")

    assert auth0.token_requests == 1


async def test_list_all_profiles_walks_pages(auth0):
    profiles = await directory_for(auth0).list_all_profiles()

    assert [profile.user_id for profile in profiles] == ["auth0|1", "auth0|2"]
    assert {request.url.params["per_page"] for request in auth0.requests} == {"100"}


async def test_update_profile(auth0):
    profile = await directory_for(auth0).update_profile("auth0|1", {"username": "TK-99"})

    assert profile.username == "TK-99"


async def test_unknown_user(auth0):
    with pytest.raises(NotFoundError):
        await directory_for(auth0).get_profile("auth0|404")


async def test_provider_down():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(UpstreamUnavailableError):
        await directory_for(handler).get_profile("auth0|1")


def test_profile_without_metadata():
    profile = Profile.from_auth0_user({"user_id": "auth0|3", "email": "three@example.com"})

    assert profile.username is None
    assert profile.permissions == frozenset()
    assert not profile.email_verified
