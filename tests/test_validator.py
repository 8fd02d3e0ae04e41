"""
Unit tests for the token validation pipeline.
"""

import pytest
from fastapi import HTTPException

from esso.errors import ConfigurationError, Forbidden, Unauthorized
from esso.modules.auth import CallableValidator, TokenIssuer, TokenValidator, as_extra_validator
from esso.modules.extraction import FieldExtractor
from esso.modules.keys import KeyStore

from conftest import make_request


@pytest.fixture
def store(secret):
    store = KeyStore("authorization")
    store.rotate(secret)
    return store


@pytest.fixture
def issuer(store):
    return TokenIssuer(store, "Bearer ")


@pytest.fixture
def validator(store):
    return TokenValidator(store, FieldExtractor("authorization"), token_prefix="Bearer ")


@pytest.mark.asyncio
async def test_no_token_is_unauthorized(validator):
    """Test a request without any credential."""
    with pytest.raises(Unauthorized) as exc_info:
        await validator.validate(make_request())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Unauthorized"


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["13543125132", "bacon 123", "bearer abc", "Bearer fake123", "Bearer " + "1" * 64])
async def test_invalid_tokens_are_forbidden(validator, value):
    """Test wrong prefixes and garbage bodies are rejected with 403."""
    with pytest.raises(Forbidden) as exc_info:
        await validator.validate(make_request(headers={"authorization": value}))

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Forbidden"


@pytest.mark.asyncio
async def test_valid_token_attaches_payload(validator, issuer):
    """Test a valid token puts its payload on request.state."""
    request = make_request(headers={"authorization": await issuer.issue({"a": 1})})

    auth = await validator.validate(request)

    assert auth == {"a": 1}
    assert request.state.auth == {"a": 1}


@pytest.mark.asyncio
async def test_empty_payload_decodes_to_empty_mapping(validator, issuer):
    """Test the sentinel path."""
    request = make_request(headers={"authorization": await issuer.issue()})

    assert await validator.validate(request) == {}


@pytest.mark.asyncio
async def test_header_takes_precedence(validator, issuer):
    """Test the header token is the one validated when all sources carry one."""
    header_token = await issuer.issue({"source": "header"})
    query_token = (await issuer.issue({"source": "query"})).replace(" ", "%20")
    cookie_token = await issuer.issue({"source": "cookie"})
    request = make_request(
        headers={"authorization": header_token, "cookie": f"authorization={cookie_token}"},
        query_string=f"authorization={query_token}",
    )

    assert await validator.validate(request) == {"source": "header"}


@pytest.mark.asyncio
async def test_disabled_prefix_accepts_bare_token(store):
    """Test validation without a prefix."""
    validator = TokenValidator(store, FieldExtractor("authorization"), token_prefix=None)
    token = await TokenIssuer(store, None).issue({"a": 1})

    assert await validator.validate(make_request(headers={"authorization": token})) == {"a": 1}


@pytest.mark.asyncio
async def test_prefix_is_case_sensitive(validator, issuer):
    """Test the prefix must match exactly."""
    token = (await issuer.issue({"a": 1})).replace("Bearer ", "bearer ")

    with pytest.raises(Forbidden):
        await validator.validate(make_request(headers={"authorization": token}))


@pytest.mark.asyncio
async def test_custom_auth_field(store, issuer):
    """Test the payload is attached under the configured field."""
    validator = TokenValidator(store, FieldExtractor("authorization"), auth_field="greatest")
    request = make_request(headers={"authorization": await issuer.issue({"a": 1})})

    await validator.validate(request)

    assert request.state.greatest == {"a": 1}


@pytest.mark.asyncio
async def test_token_from_previous_key_is_accepted(store, issuer, validator):
    """Test rotation keeps the previous key usable."""
    token = await issuer.issue({"a": 1})
    await store.rotate_async("2" * 20)

    assert await validator.validate(make_request(headers={"authorization": token})) == {"a": 1}

    await store.rotate_async("3" * 20)
    with pytest.raises(Forbidden):
        await validator.validate(make_request(headers={"authorization": token}))


@pytest.mark.asyncio
async def test_missing_key_fails_closed():
    """Test validation against an empty store raises instead of accepting."""
    validator = TokenValidator(KeyStore("authorization"), FieldExtractor("authorization"))

    with pytest.raises(ConfigurationError):
        await validator.validate(make_request(headers={"authorization": "Bearer " + "1" * 64}))


@pytest.mark.asyncio
async def test_extra_validation_sees_payload(store, issuer):
    """Test the hook runs with the payload already attached."""
    seen = {}

    async def hook(request, response):
        seen.update(request.state.auth)

    validator = TokenValidator(
        store, FieldExtractor("authorization"), extra_validator=as_extra_validator(hook)
    )

    await validator.validate(make_request(headers={"authorization": await issuer.issue({"id": 3})}))

    assert seen == {"id": 3}


@pytest.mark.asyncio
async def test_extra_validation_error_propagates_unchanged(store, issuer):
    """Test hook exceptions keep their status and message."""
    def hook(request, response):
        if request.state.auth["id"] > 10:
            raise HTTPException(status_code=418, detail="extra validation failed")

    validator = TokenValidator(
        store, FieldExtractor("authorization"), extra_validator=as_extra_validator(hook)
    )
    request = make_request(headers={"authorization": await issuer.issue({"id": 15})})

    with pytest.raises(HTTPException) as exc_info:
        await validator.validate(request)

    assert exc_info.value.status_code == 418
    assert exc_info.value.detail == "extra validation failed"
    assert not hasattr(request.state, "auth")


@pytest.mark.asyncio
async def test_extra_validation_may_return_error(store, issuer):
    """Test a hook returning an exception rejects the request."""
    rejection = HTTPException(status_code=403, detail="role missing")
    validator = TokenValidator(
        store,
        FieldExtractor("authorization"),
        extra_validator=CallableValidator(lambda request, response: rejection),
    )

    with pytest.raises(HTTPException) as exc_info:
        await validator.validate(make_request(headers={"authorization": await issuer.issue({"a": 1})}))

    assert exc_info.value is rejection


@pytest.mark.asyncio
async def test_extra_validator_object(store, issuer):
    """Test objects implementing validate() are used as-is."""
    class RoleValidator:
        async def validate(self, request, response):
            if request.state.auth.get("role") != "admin":
                raise HTTPException(status_code=403, detail="admins only")

    hook = RoleValidator()
    assert as_extra_validator(hook) is hook

    validator = TokenValidator(store, FieldExtractor("authorization"), extra_validator=hook)

    with pytest.raises(HTTPException, match="admins only"):
        await validator.validate(make_request(headers={"authorization": await issuer.issue({"role": "user"})}))
    assert await validator.validate(
        make_request(headers={"authorization": await issuer.issue({"role": "admin"})})
    ) == {"role": "admin"}


def test_as_extra_validator_rejects_non_callable():
    """Test non-callable hooks are a configuration error."""
    with pytest.raises(ConfigurationError):
        as_extra_validator(123)


def test_as_extra_validator_rejects_non_callable_validate():
    """Test objects whose validate attribute is not a method are rejected."""
    class Broken:
        validate = "nope"

    with pytest.raises(ConfigurationError):
        as_extra_validator(Broken())


@pytest.mark.asyncio
async def test_extra_validator_object_with_sync_validate(store, issuer):
    """Test objects with a synchronous validate() are wrapped, not awaited directly."""
    class OwnerValidator:
        def validate(self, request, response):
            if request.state.auth.get("owner") is not True:
                raise HTTPException(status_code=403, detail="owners only")

    hook = as_extra_validator(OwnerValidator())
    assert isinstance(hook, CallableValidator)

    validator = TokenValidator(store, FieldExtractor("authorization"), extra_validator=hook)

    with pytest.raises(HTTPException, match="owners only"):
        await validator.validate(make_request(headers={"authorization": await issuer.issue({"owner": False})}))
    assert await validator.validate(
        make_request(headers={"authorization": await issuer.issue({"owner": True})})
    ) == {"owner": True}
