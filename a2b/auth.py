"""Adobe IMS server-to-server (OAuth client credentials) authentication."""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import requests

from .constants import TOKEN_CACHE_TTL_SECONDS
from .errors import AuthenticationError, MissingCredentialsError

logger = logging.getLogger(__name__)

IMS_TOKEN_URL = os.environ.get("IMS_TOKEN_URL", "https://ims-na1.adobelogin.com/ims/token/v3")
REQUEST_TIMEOUT_SECONDS = 30
STATE_RECHECK_SECONDS = 60

# Tokens cached for the life of a warm Lambda container: cache key -> (token, expires_at)
_token_cache: Dict[str, Tuple[str, float]] = {}


def clean_scopes(raw_scopes: Any) -> str:
    """Normalize scopes to the comma separated form IMS expects.

    Scopes come from the environment as a JSON array string, e.g.
    '["AdobeID","openid","read_organizations"]', or already comma separated.
    """
    if isinstance(raw_scopes, (list, tuple)):
        return ",".join(raw_scopes)

    raw_scopes = str(raw_scopes).strip()
    if raw_scopes.startswith("["):
        try:
            return ",".join(json.loads(raw_scopes))
        except json.JSONDecodeError as error:
            raise MissingCredentialsError(f"S2S_SCOPES is not a valid JSON array: {error}") from error
    return raw_scopes


@dataclass
class S2SAuthenticationCredentials:
    clientId: str
    clientSecret: str
    scopes: str
    orgId: str

    def __repr__(self) -> str:
        return f"S2SAuthenticationCredentials(clientId={self.clientId!r}, orgId={self.orgId!r}, scopes={self.scopes!r})"

    def is_complete(self) -> bool:
        return all((self.clientId, self.clientSecret, self.scopes, self.orgId))

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "S2SAuthenticationCredentials":
        required = ("S2S_CLIENT_ID", "S2S_CLIENT_SECRET", "S2S_SCOPES", "ORG_ID")
        missing = [name for name in required if not params.get(name)]
        if missing:
            raise MissingCredentialsError(f"Missing S2S credential parameter(s): {', '.join(missing)}")

        return cls(
            clientId=params["S2S_CLIENT_ID"],
            clientSecret=params["S2S_CLIENT_SECRET"],
            scopes=clean_scopes(params["S2S_SCOPES"]),
            orgId=params["ORG_ID"],
        )


def clear_token_cache() -> None:
    _token_cache.clear()


def _request_token(credentials: S2SAuthenticationCredentials) -> Tuple[str, int]:
    form = {
        "client_id": credentials.clientId,
        "client_secret": credentials.clientSecret,
        "grant_type": "client_credentials",
        "scope": credentials.scopes,
    }
    headers = {"x-gw-ims-org-id": credentials.orgId}

    try:
        response = requests.post(IMS_TOKEN_URL, data=form, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS)
    except requests.RequestException as error:
        raise AuthenticationError(f"IMS token request failed: {error}") from error

    if not response.ok:
        logger.error("IMS token request failed with status %s: %s", response.status_code, response.text)
        raise AuthenticationError(f"IMS token request failed with status {response.status_code}")

    body = response.json()
    token = body.get("access_token")
    if not token:
        logger.error("IMS token response did not contain an access token")
        raise AuthenticationError("IMS token response did not contain an access token")

    # expires_in is in seconds for the v3 endpoint
    return token, int(body.get("expires_in") or TOKEN_CACHE_TTL_SECONDS)


def get_server_to_server_token(credentials: S2SAuthenticationCredentials, state_store=None) -> str:
    """Return a bearer token for the credentials, using the in-process and state store caches."""
    cache_key = f"s2s-token-{credentials.clientId}"

    cached = _token_cache.get(cache_key)
    if cached and cached[1] > time.time():
        return cached[0]

    if state_store is not None:
        token = state_store.get(cache_key)
        if token:
            logger.debug("Found cached S2S token in state store")
            # remaining TTL is unknown here, so re-check the state store within a minute
            _token_cache[cache_key] = (token, time.time() + STATE_RECHECK_SECONDS)
            return token

    token, expires_in = _request_token(credentials)
    ttl = max(1, min(expires_in - 60, TOKEN_CACHE_TTL_SECONDS))
    _token_cache[cache_key] = (token, time.time() + ttl)

    if state_store is not None:
        state_store.put(cache_key, token, ttl=ttl)

    logger.info("Fetched new S2S token for client %s (cached %ss)", credentials.clientId, ttl)
    return token
