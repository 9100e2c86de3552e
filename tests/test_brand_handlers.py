"""New brand registration and brand admin handlers."""
import json
from datetime import datetime, timedelta, timezone

import pytest

from a2b.brand import Brand
from a2b.brand_manager import BrandManager


@pytest.fixture
def stores(load_handler, monkeypatch, state_store, file_store):
    manager = BrandManager(state_store=state_store, file_store=file_store)
    for name in ("new_brand_registration", "brand_admin"):
        module = load_handler(name)
        monkeypatch.setattr(module, "state_store", state_store)
        monkeypatch.setattr(module, "brand_manager", manager)
    return manager


@pytest.fixture
def registration(load_handler, stores):
    return load_handler("new_brand_registration")


@pytest.fixture
def admin(load_handler, stores):
    return load_handler("brand_admin")


# ---------------------------------------------------------------------------
# new brand registration
# ---------------------------------------------------------------------------

def test_registration_requires_name_and_endpoint(registration, credentials):
    result = registration.main(dict(credentials, name="Acme"))

    assert result["statusCode"] == 400
    assert result["body"]["error"] == "missing parameter(s) 'endPointUrl'"


def test_registration_saves_and_announces_brand(registration, stores, http, credentials):
    result = registration.main(dict(credentials, name="Acme", endPointUrl="https://acme.example.com/a2b"))

    assert result["statusCode"] == 200
    brand = result["body"]["brand"]
    assert result["body"]["message"] == f"Brand registration processed successfully for brand id {brand['bid']}"
    assert brand["enabled"] is False
    assert stores.get_brand(brand["bid"]).name == "Acme"

    [event] = http.published()
    assert event["type"] == "com.adobe.a2b.registration.received"
    assert event["data"]["brandId"] == brand["bid"]
    assert event["data"]["secret"] == brand["secret"]


def test_registration_publish_failure_keeps_brand(registration, stores, http, credentials, file_store):
    http.ingress_status = 500

    result = registration.main(dict(credentials, name="Acme", endPointUrl="https://acme.example.com/a2b"))

    assert result["statusCode"] == 500
    assert result["body"]["message"] == "Error handling event"
    assert len(file_store.list("brand/")) == 1


def test_registration_store_failure(registration, stores, credentials, monkeypatch):
    def fail(brand):
        raise RuntimeError("Unable to write")

    monkeypatch.setattr(stores, "save_brand", fail)

    result = registration.main(dict(credentials, name="Acme", endPointUrl="https://acme.example.com/a2b"))

    assert result["statusCode"] == 500
    assert result["body"]["message"] == "Error saving brand"


# ---------------------------------------------------------------------------
# brand admin
# ---------------------------------------------------------------------------

def _saved_brand(manager, name, created=None):
    brand = Brand.new(name, f"https://{name.lower()}.example.com")
    if created:
        brand.createdAt = created
    return manager.save_brand(brand)


@pytest.mark.parametrize("params, error", [
    ({}, "missing parameter(s) 'operation'"),
    ({"operation": "rename"}, "Unsupported operation: rename"),
    ({"operation": "enable"}, "missing parameter(s) 'bid'"),
])
def test_admin_bad_requests(admin, params, error):
    result = admin.main(params)

    assert result["statusCode"] == 400
    assert result["body"]["error"] == error


def test_admin_lists_brands_oldest_first(admin, stores):
    now = datetime.now(timezone.utc)
    newer = _saved_brand(stores, "Globex", now)
    older = _saved_brand(stores, "Acme", now - timedelta(days=1))

    result = admin.main({"operation": "list"})

    assert result["body"]["message"] == "Found 2 brands"
    assert [b["bid"] for b in result["body"]["brands"]] == [older.bid, newer.bid]


def test_admin_get_unknown_brand_is_404(admin):
    result = admin.main({"operation": "get", "bid": "missing"})

    assert result["statusCode"] == 404
    assert result["body"]["message"] == "Not found"


def test_admin_enable_saves_and_announces(admin, stores, http, credentials):
    brand = _saved_brand(stores, "Acme")

    result = admin.main(dict(credentials, operation="enable", bid=brand.bid))

    assert result["statusCode"] == 200
    assert result["body"]["brand"]["enabled"] is True
    assert stores.get_brand(brand.bid).enabled is True
    [event] = http.published()
    assert event["type"] == "com.adobe.a2b.registration.enabled"
    assert event["data"]["enabled"] is True


def test_admin_disable_announces(admin, stores, http, credentials):
    brand = _saved_brand(stores, "Acme")
    brand.enable()
    stores.save_brand(brand)

    result = admin.main(dict(credentials, operation="disable", bid=brand.bid))

    assert result["statusCode"] == 200
    assert stores.get_brand(brand.bid).enabled is False
    assert http.published()[0]["type"] == "com.adobe.a2b.registration.disabled"


def test_admin_enable_publish_failure(admin, stores, http, credentials):
    http.ingress_status = 500
    brand = _saved_brand(stores, "Acme")

    result = admin.main(dict(credentials, operation="enable", bid=brand.bid))

    assert result["statusCode"] == 500
    assert result["body"]["message"] == "Error handling event"


def test_admin_delete(admin, stores, file_store):
    brand = _saved_brand(stores, "Acme")

    result = admin.main({"operation": "delete", "bid": brand.bid})

    assert result["statusCode"] == 200
    assert file_store.files == {}


# ---------------------------------------------------------------------------
# Function URL access
# ---------------------------------------------------------------------------

def _url_event(body, headers=None):
    return {"requestContext": {"http": {"method": "POST"}}, "headers": headers or {}, "body": body}


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic dXNlcjpwYXNz"}, {"Authorization": "Bearer "}])
def test_admin_over_url_without_bearer_token_is_401(admin, stores, file_store, headers):
    brand = _saved_brand(stores, "Acme")

    for body in ({"operation": "list"}, json.dumps({"operation": "delete", "bid": brand.bid})):
        response = admin.lambda_handler(_url_event(body, headers), None)

        assert response["statusCode"] == 401
        assert json.loads(response["body"])["message"] == "Unauthorized"

    assert f"brand/{brand.bid}.json" in file_store.files


def test_registration_over_url_without_bearer_token_is_401(registration, stores, file_store, http):
    body = json.dumps({"name": "Acme", "endPointUrl": "https://acme.example.com/a2b"})

    response = registration.lambda_handler(_url_event(body), None)

    assert response["statusCode"] == 401
    assert json.loads(response["body"])["error"] == "missing header(s) 'authorization'"
    assert file_store.files == {}
    assert http.published() == []


def test_admin_over_url_never_returns_secrets(admin, stores, http, credentials):
    brand = _saved_brand(stores, "Acme")
    headers = {"Authorization": "Bearer ims-user-token"}

    listed = json.loads(admin.lambda_handler(_url_event({"operation": "list"}, headers), None)["body"])
    fetched = json.loads(admin.lambda_handler(_url_event({"operation": "get", "bid": brand.bid}, headers), None)["body"])
    enabled = admin.main(dict(credentials, operation="enable", bid=brand.bid))

    assert [b["bid"] for b in listed["brands"]] == [brand.bid]
    assert "secret" not in listed["brands"][0]
    assert "secret" not in fetched["brand"]
    assert "secret" not in enabled["body"]["brand"]


def test_registration_returns_secret_once(registration, stores, http, credentials):
    result = registration.main(dict(credentials, name="Acme", endPointUrl="https://acme.example.com/a2b"))

    assert result["body"]["brand"]["secret"] == stores.get_brand(result["body"]["brand"]["bid"]).secret
