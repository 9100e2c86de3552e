"""AEM as a Cloud Service asset REST helpers."""
import json
import logging
from typing import Any, Dict, Optional

import requests

from .auth import S2SAuthenticationCredentials, get_server_to_server_token
from .common import get_bearer_token
from .errors import AemRequestError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30
DOWNLOAD_REL = "http://ns.adobe.com/adobecloud/rel/download"


def get_aem_auth(params: Dict[str, Any], state_store=None) -> Optional[str]:
    """Return the bearer token to call AEM with.

    AEM_AUTH_TYPE=server2server uses the bridge's S2S token (shared with
    event publishing through the state store), anything else forwards the
    caller's own bearer token.
    """
    if params.get("AEM_AUTH_TYPE") != "server2server":
        logger.debug("Using caller bearer token for AEM")
        return get_bearer_token(params)

    credentials = S2SAuthenticationCredentials.from_params(params)
    return get_server_to_server_token(credentials, state_store)


def _request(method: str, url: str, token: Optional[str], headers: Optional[Dict[str, str]] = None, **kwargs):
    all_headers = {"Authorization": f"Bearer {token}"}
    all_headers.update(headers or {})

    try:
        response = requests.request(method, url, headers=all_headers, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs)
    except requests.RequestException as error:
        raise AemRequestError(f"{method} {url} failed: {error}") from error

    if not response.ok:
        raise AemRequestError(f"{method} {url} failed with status code {response.status_code}")
    return response


def get_aem_asset_data(aem_host: str, aem_asset_path: str, params: Dict[str, Any], state_store=None) -> Dict[str, Any]:
    """Fetch the asset node (3 levels deep) through the Sling JSON servlet."""
    url = f"{aem_host}{aem_asset_path}.3.json"
    logger.debug("get_aem_asset_data %s", url)
    token = get_aem_auth(params, state_store)
    return _request("GET", url, token, {"Content-Type": "application/json"}).json()


def get_aem_asset_data_rapi(aem_host: str, aem_asset_path: str, params: Dict[str, Any], state_store=None) -> Dict[str, Any]:
    """Fetch the asset's repository API description (links, ids)."""
    url = f"{aem_host}/adobe/repository"
    token = get_aem_auth(params, state_store)
    headers = {"Content-Type": "application/json", "x-api-key": params.get("S2S_CLIENT_ID", "")}
    return _request("GET", url, token, headers, params={"path": aem_asset_path}).json()


def get_aem_asset_presigned_download_url(aem_host: str, aem_asset_path: str, params: Dict[str, Any], state_store=None) -> str:
    repo_data = get_aem_asset_data_rapi(aem_host, aem_asset_path, params, state_store)

    try:
        download_url = repo_data["_links"][DOWNLOAD_REL]["href"]
    except (KeyError, TypeError) as error:
        raise AemRequestError(f"No download link for {aem_host}{aem_asset_path}") from error

    token = get_aem_auth(params, state_store)
    headers = {"Content-Type": "application/json", "x-api-key": params.get("S2S_CLIENT_ID", "")}
    href = _request("GET", download_url, token, headers).json().get("href")
    if not href:
        raise AemRequestError(f"Download link for {aem_host}{aem_asset_path} returned no href")
    return href


def add_metadata_to_aem_asset(
    aem_host: str, aem_asset_path: str, tag_path: str, tag_value: Any, params: Dict[str, Any], state_store=None
) -> Dict[str, str]:
    """Add one application metadata property to an asset with a JSON patch."""
    if not aem_asset_path.startswith("/content/dam"):
        aem_asset_path = "/content/dam" + aem_asset_path

    url = f"{aem_host}/adobe/repository{aem_asset_path};resource=applicationmetadata"
    body = json.dumps([{"op": "add", "path": tag_path, "value": tag_value}])
    headers = {
        "X-Api-Key": params.get("S2S_CLIENT_ID", ""),
        "Content-Type": "application/json-patch+json",
    }
    token = get_aem_auth(params, state_store)
    _request("PATCH", url, token, headers, data=body)
    logger.info("Set %s on %s%s", tag_path, aem_host, aem_asset_path)
    return {"message": "success"}
