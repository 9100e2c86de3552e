import pytest

from a2b.auth import (
    IMS_TOKEN_URL,
    S2SAuthenticationCredentials,
    clean_scopes,
    get_server_to_server_token,
)
from a2b.errors import AuthenticationError, MissingCredentialsError

from conftest import FakeResponse


@pytest.mark.parametrize("raw", [
    ["AdobeID", "openid"],
    '["AdobeID","openid"]',
    "AdobeID,openid",
])
def test_clean_scopes(raw):
    assert clean_scopes(raw) == "AdobeID,openid"


def test_credentials_from_params(credentials):
    creds = S2SAuthenticationCredentials.from_params(credentials)

    assert creds.clientId == "client-id"
    assert creds.scopes == "AdobeID,openid,read_organizations"
    assert creds.is_complete()
    assert "client-secret" not in repr(creds)


def test_credentials_from_params_lists_missing_names():
    with pytest.raises(MissingCredentialsError, match="S2S_CLIENT_SECRET, ORG_ID"):
        S2SAuthenticationCredentials.from_params({"S2S_CLIENT_ID": "id", "S2S_SCOPES": "openid"})


def test_token_request_and_memory_cache(http, credentials):
    creds = S2SAuthenticationCredentials.from_params(credentials)

    assert get_server_to_server_token(creds) == "ims-token"
    assert get_server_to_server_token(creds) == "ims-token"

    calls = http.token_calls()
    assert len(calls) == 1
    assert calls[0]["url"] == IMS_TOKEN_URL
    assert calls[0]["data"]["grant_type"] == "client_credentials"
    assert calls[0]["data"]["scope"] == "AdobeID,openid,read_organizations"
    assert calls[0]["headers"] == {"x-gw-ims-org-id": "org-1@AdobeOrg"}


def test_token_is_shared_through_state_store(http, credentials, state_store):
    creds = S2SAuthenticationCredentials.from_params(credentials)

    get_server_to_server_token(creds, state_store)

    assert state_store.values["s2s-token-client-id"] == "ims-token"
    # capped at the 22 minute token cache lifetime
    assert state_store.ttls["s2s-token-client-id"] == 1320


def test_token_from_state_store_skips_ims(http, credentials, state_store):
    state_store.put("s2s-token-client-id", "stored-token")
    creds = S2SAuthenticationCredentials.from_params(credentials)

    assert get_server_to_server_token(creds, state_store) == "stored-token"
    assert http.token_calls() == []


def test_failed_token_request_raises(http, credentials):
    http.token_response = FakeResponse(401, {"error": "invalid_client"}, text="invalid_client")
    creds = S2SAuthenticationCredentials.from_params(credentials)

    with pytest.raises(AuthenticationError, match="status 401"):
        get_server_to_server_token(creds)


def test_token_response_without_access_token_raises(http, credentials):
    http.token_response = FakeResponse(200, {"expires_in": 100})
    creds = S2SAuthenticationCredentials.from_params(credentials)

    with pytest.raises(AuthenticationError):
        get_server_to_server_token(creds)
