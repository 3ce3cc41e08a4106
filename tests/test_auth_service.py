import pytest

from bookburst.core.config import settings
from bookburst.core.security import decode_access_token
from bookburst.services.auth_service import AuthService


@pytest.fixture
def auth_service(user_repo, revocations):
    return AuthService(user_repository=user_repo, revocations=revocations)


async def test_signup_and_login(auth_service):
    user = await auth_service.signup("Ann@Example.com", " Ann ", "secret123")

    assert user.email == "ann@example.com"
    assert user.name == "Ann"
    assert user.hashed_password != "secret123"

    token = await auth_service.login("ann@example.com", "secret123")
    payload = decode_access_token(token)
    assert payload["sub"] == str(user.id)
    assert payload["jti"]


async def test_duplicate_email_rejected(auth_service):
    await auth_service.signup("ann@example.com", "Ann", "secret123")

    with pytest.raises(ValueError, match="already registered"):
        await auth_service.signup("ANN@example.com", "Other Ann", "secret456")


async def test_wrong_password_rejected(auth_service):
    await auth_service.signup("ann@example.com", "Ann", "secret123")

    with pytest.raises(ValueError):
        await auth_service.login("ann@example.com", "nope")


async def test_each_token_has_its_own_id(auth_service):
    await auth_service.signup("ann@example.com", "Ann", "secret123")

    first = decode_access_token(await auth_service.login("ann@example.com", "secret123"))
    second = decode_access_token(await auth_service.login("ann@example.com", "secret123"))

    assert first["jti"] != second["jti"]


async def test_signout_revokes_token_until_it_expires(auth_service, revocations):
    await auth_service.signup("ann@example.com", "Ann", "secret123")
    token = await auth_service.login("ann@example.com", "secret123")
    jti = decode_access_token(token)["jti"]

    assert await auth_service.signout(token) is True

    assert await revocations.is_revoked(jti)
    assert 1 <= revocations.revoked[jti] <= settings.access_token_expire_minutes * 60


async def test_signout_with_garbage_token_revokes_nothing(auth_service, revocations):
    assert await auth_service.signout("not-a-jwt") is False
    assert revocations.revoked == {}


async def test_signout_without_revocation_list_is_noop(user_repo):
    service = AuthService(user_repository=user_repo)
    await service.signup("ann@example.com", "Ann", "secret123")
    token = await service.login("ann@example.com", "secret123")

    assert await service.signout(token) is False
