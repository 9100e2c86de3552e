import json

import pytest

from a2b.aem import (
    DOWNLOAD_REL,
    add_metadata_to_aem_asset,
    get_aem_asset_data,
    get_aem_asset_presigned_download_url,
    get_aem_auth,
)
from a2b.errors import AemRequestError

from conftest import FakeResponse

HOST = "https://author-p1-e2.adobeaemcloud.com"
ASSET = "/content/dam/acme/hero.jpg"


@pytest.fixture
def caller_params():
    return {"__headers": {"authorization": "Bearer caller-token"}}


def test_auth_forwards_caller_token(caller_params):
    assert get_aem_auth(caller_params) == "caller-token"


def test_server_to_server_auth_shares_the_s2s_token(http, credentials, state_store):
    params = dict(credentials, AEM_AUTH_TYPE="server2server")

    assert get_aem_auth(params, state_store) == "ims-token"
    assert get_aem_auth(params, state_store) == "ims-token"

    assert state_store.values == {"s2s-token-client-id": "ims-token"}
    assert len(http.token_calls()) == 1


def test_server_to_server_auth_cache_follows_token_expiry(http, credentials, state_store):
    http.token_response = FakeResponse(200, {"access_token": "short-token", "expires_in": 120})
    params = dict(credentials, AEM_AUTH_TYPE="server2server")

    get_aem_auth(params, state_store)

    assert state_store.ttls == {"s2s-token-client-id": 60}


def test_get_asset_data(http, caller_params):
    http.routes[("GET", f"{HOST}{ASSET}.3.json")] = FakeResponse(200, {"jcr:uuid": "uuid-1"})

    assert get_aem_asset_data(HOST, ASSET, caller_params) == {"jcr:uuid": "uuid-1"}
    assert http.calls[0]["headers"]["Authorization"] == "Bearer caller-token"


def test_get_asset_data_failure_raises(http, caller_params):
    with pytest.raises(AemRequestError, match="404"):
        get_aem_asset_data(HOST, ASSET, caller_params)


def test_presigned_download_url(http, caller_params):
    download = f"{HOST}/adobe/repository/download/uuid-1"
    http.routes[("GET", f"{HOST}/adobe/repository")] = FakeResponse(200, {"_links": {DOWNLOAD_REL: {"href": download}}})
    http.routes[("GET", download)] = FakeResponse(200, {"href": "https://cdn.example.com/hero.jpg?sig=1"})

    assert get_aem_asset_presigned_download_url(HOST, ASSET, caller_params) == "https://cdn.example.com/hero.jpg?sig=1"
    assert http.calls[0]["params"] == {"path": ASSET}


def test_presigned_download_url_without_link_raises(http, caller_params):
    http.routes[("GET", f"{HOST}/adobe/repository")] = FakeResponse(200, {"_links": {}})

    with pytest.raises(AemRequestError, match="No download link"):
        get_aem_asset_presigned_download_url(HOST, ASSET, caller_params)


def test_add_metadata_prefixes_dam_path(http, caller_params):
    url = f"{HOST}/adobe/repository/content/dam/acme/hero.jpg;resource=applicationmetadata"
    http.routes[("PATCH", url)] = FakeResponse(200, {})

    result = add_metadata_to_aem_asset(HOST, "/acme/hero.jpg", "/a2d__last_sync", "2024-05-01", caller_params)

    assert result == {"message": "success"}
    call = http.calls[0]
    assert call["headers"]["Content-Type"] == "application/json-patch+json"
    assert json.loads(call["data"]) == [{"op": "add", "path": "/a2d__last_sync", "value": "2024-05-01"}]
