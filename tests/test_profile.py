import httpx
import pytest

from opsboard.api.adapters import HttpAdapter, MockAdapter
from opsboard.api.client import RestClient
from opsboard.core.exceptions import ApiError, DomainValidationError
from opsboard.schemas.auth import SessionUser
from opsboard.services.profile import ProfileService, validate_password_change, validate_profile


class CountingAdapter(MockAdapter):
    def __init__(self, session, fail_me=False):
        super().__init__(session)
        self.fail_me = fail_me
        self.updates = 0

    async def me(self):
        if self.fail_me:
            raise ApiError("Network error: refused")
        return SessionUser(id="u_actor", email="actor@example.com", name="Server Name", role="ADMIN")

    async def update_me(self, name, email):
        self.updates += 1
        return await super().update_me(name, email)


@pytest.mark.asyncio
async def test_bootstrap_refreshes_session_user(admin_session):
    service = ProfileService(CountingAdapter(admin_session), admin_session)
    user = await service.bootstrap()
    assert user.name == "Server Name"
    assert admin_session.user.name == "Server Name"


@pytest.mark.asyncio
async def test_bootstrap_falls_back_to_stored_user(admin_session):
    service = ProfileService(CountingAdapter(admin_session, fail_me=True), admin_session)
    user = await service.bootstrap()
    assert user.name == "Actor"


@pytest.mark.asyncio
async def test_unchanged_profile_is_not_sent(admin_session):
    adapter = CountingAdapter(admin_session)
    service = ProfileService(adapter, admin_session)

    assert not service.is_dirty(" Actor ", "ACTOR@example.com")
    await service.save_profile("Actor", "actor@example.com")
    assert adapter.updates == 0

    saved = await service.save_profile("Actor Two", "actor2@example.com")
    assert adapter.updates == 1
    assert saved.email == "actor2@example.com"
    assert admin_session.user.name == "Actor Two"


@pytest.mark.parametrize("name,email,message", [
    ("", "a@b.co", "Name is required."),
    ("A", "", "Email is required."),
    ("A", "nope", "Enter a valid email address."),
])
def test_profile_validation(name, email, message):
    with pytest.raises(DomainValidationError) as exc:
        validate_profile(name, email)
    assert exc.value.message == message


@pytest.mark.parametrize("current,new,confirm,field", [
    ("", "secret1", "secret1", "current_password"),
    ("old", "short", "short", "new_password"),
    ("old", "secret1", "secret2", "confirm_password"),
])
def test_password_change_validation(current, new, confirm, field):
    with pytest.raises(DomainValidationError) as exc:
        validate_password_change(current, new, confirm)
    assert exc.value.field == field


@pytest.mark.asyncio
async def test_change_password_calls_adapter(admin_session):
    service = ProfileService(MockAdapter(admin_session), admin_session)
    await service.change_password("old", "secret1", "secret1")


@pytest.mark.parametrize("body", [{"user": None}, {"user": {"id": "u_actor"}}, "<html>oops</html>"])
@pytest.mark.asyncio
async def test_bootstrap_survives_malformed_me_body(admin_session, body):
    def handler(request: httpx.Request):
        if isinstance(body, str):
            return httpx.Response(200, text=body)
        return httpx.Response(200, json=body)

    client = RestClient(admin_session, base_url="http://api.test", transport=httpx.MockTransport(handler))
    service = ProfileService(HttpAdapter(client), admin_session)

    user = await service.bootstrap()
    assert user.name == "Actor"
    assert admin_session.user.email == "actor@example.com"
    await client.aclose()
