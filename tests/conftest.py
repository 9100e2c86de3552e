import importlib.util
import json
import os
import sys

import pytest

# boto3 clients are created when the handler modules load
os.environ.setdefault("AWS_DEFAULT_REGION", "us-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AIO_AGENCY_EVENTS_REGISTRATION_PROVIDER_ID", "registration-provider")
os.environ.setdefault("AIO_AGENCY_EVENTS_AEM_ASSET_SYNC_PROVIDER_ID", "asset-sync-provider")

import requests  # noqa: E402

from a2b import auth, event_manager  # noqa: E402

LAMBDA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "stacks", "lambda_functions")

RUNTIME_INFO = {"consoleId": "console-1", "projectName": "a2b", "workspace": "Stage"}

CREDENTIALS = {
    "S2S_CLIENT_ID": "client-id",
    "S2S_CLIENT_SECRET": "client-secret",
    "S2S_SCOPES": '["AdobeID","openid","read_organizations"]',
    "ORG_ID": "org-1@AdobeOrg",
    "APPLICATION_RUNTIME_INFO": json.dumps(RUNTIME_INFO),
}

_handlers = {}


class FakeStateStore:
    def __init__(self):
        self.values = {}
        self.ttls = {}

    def get(self, key):
        return self.values.get(key)

    def put(self, key, value, ttl=None):
        self.values[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.values.pop(key, None)


class FakeFileStore:
    def __init__(self):
        self.files = {}

    def read(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write(self, path, content, content_type="application/json"):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[path] = content
        return f"s3://test-bucket/{path}"

    def delete(self, path):
        self.files.pop(path, None)

    def list(self, prefix):
        return sorted(path for path in self.files if path.startswith(prefix))


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeHttp:
    """Stands in for requests.post / requests.request against IMS, I/O Events and AEM."""

    def __init__(self):
        self.calls = []
        self.token_response = FakeResponse(200, {"access_token": "ims-token", "expires_in": 86399})
        self.ingress_status = 200
        self.routes = {}

    def post(self, url, data=None, headers=None, timeout=None, **kwargs):
        self.calls.append({"method": "POST", "url": url, "data": data, "headers": headers, **kwargs})
        if url == auth.IMS_TOKEN_URL:
            return self.token_response
        return FakeResponse(self.ingress_status, text="ingress")

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "headers": headers, **kwargs})
        return self.routes.get((method, url), FakeResponse(404))

    def token_calls(self):
        return [call for call in self.calls if call["url"] == auth.IMS_TOKEN_URL]

    def published(self):
        return [
            json.loads(call["data"])
            for call in self.calls
            if call["url"] == event_manager.AIO_EVENTS_INGRESS_URL
        ]


@pytest.fixture(autouse=True)
def _clear_token_cache():
    auth.clear_token_cache()
    yield
    auth.clear_token_cache()


@pytest.fixture
def state_store():
    return FakeStateStore()


@pytest.fixture
def file_store():
    return FakeFileStore()


@pytest.fixture
def http(monkeypatch):
    fake = FakeHttp()
    monkeypatch.setattr(requests, "post", fake.post)
    monkeypatch.setattr(requests, "request", fake.request)
    return fake


@pytest.fixture
def credentials():
    return dict(CREDENTIALS)


@pytest.fixture
def load_handler():
    """Import stacks/lambda_functions/<name>/index.py under a unique module name."""

    def load(name):
        if name not in _handlers:
            module_name = f"{name}_index"
            spec = importlib.util.spec_from_file_location(module_name, os.path.join(LAMBDA_DIR, name, "index.py"))
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
            _handlers[name] = module
        return _handlers[name]

    return load
