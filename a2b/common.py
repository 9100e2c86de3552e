"""Request/response plumbing shared by the bridge Lambdas."""
import base64
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import boto3

from .constants import DEFAULT_ERROR_MESSAGES
from .errors import ActionInvocationError

logger = logging.getLogger(__name__)

# Request headers are carried inside the params under this key
HEADERS_KEY = "__headers"

# Values deployed with the function; they win over anything sent in a request
CONFIG_KEYS = (
    "S2S_CLIENT_ID",
    "S2S_CLIENT_SECRET",
    "S2S_SCOPES",
    "ORG_ID",
    "APPLICATION_RUNTIME_INFO",
    "AEM_AUTH_TYPE",
    "LOG_LEVEL",
)

HIDDEN_PARAMS = ("S2S_CLIENT_SECRET", "secret")

_lambda_client = None


def load_config() -> Dict[str, str]:
    return {key: os.environ[key] for key in CONFIG_KEYS if os.environ.get(key)}


def is_http_event(event: Dict[str, Any]) -> bool:
    return isinstance(event, dict) and "requestContext" in event


def extract_params(event: Dict[str, Any], config: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Flatten a Lambda event into a single params dict.

    Handles direct invocations (the event is the params) and Function URL /
    API Gateway events (JSON body, query string and headers).
    """
    if is_http_event(event):
        body = event.get("body") or ""
        if isinstance(body, dict):
            params = dict(body)
        else:
            if body and event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            try:
                params = json.loads(body) if body else {}
            except json.JSONDecodeError as error:
                raise ValueError("Invalid JSON: Input must be a valid JSON object") from error
        if not isinstance(params, dict):
            raise ValueError("Invalid JSON: Input must be a valid JSON object")

        for key, value in (event.get("queryStringParameters") or {}).items():
            params.setdefault(key, value)
        params[HEADERS_KEY] = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    else:
        params = dict(event or {})

    params.update(load_config() if config is None else config)
    return params


def http_response(event: Dict[str, Any], result: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a handler result for the caller: serialized for HTTP, as-is for invokes."""
    if not is_http_event(event):
        return result
    return {
        "statusCode": result.get("statusCode", 200),
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(result.get("body", {}), default=str),
    }


def string_parameters(params: Dict[str, Any]) -> str:
    """Log ready string of the params, with the authorization header and secrets hidden."""
    headers = dict(params.get(HEADERS_KEY) or {})
    if "authorization" in headers:
        headers["authorization"] = "<hidden>"

    visible = {key: ("<hidden>" if key in HIDDEN_PARAMS else value) for key, value in params.items()}
    visible[HEADERS_KEY] = headers
    return json.dumps(visible, default=str)


def _get_missing_keys(obj: Dict[str, Any], required: Iterable[str]) -> List[str]:
    # A value is missing when absent or ''. 0 and None count as present.
    missing = []
    for name in required:
        *parents, last = name.split(".")
        current = obj
        for part in parents:
            current = current.get(part) if isinstance(current, dict) else None
            current = current or {}
        if not isinstance(current, dict) or last not in current or current[last] == "":
            missing.append(name)
    return missing


def check_missing_request_inputs(
    params: Dict[str, Any], required_params: Iterable[str] = (), required_headers: Iterable[str] = ()
) -> Optional[str]:
    """Return an error message describing missing inputs, or None when all are present.

    Required params may be nested with a '.' separator, e.g. 'data.app_runtime_info'.
    """
    error_message = None

    missing_headers = _get_missing_keys(params.get(HEADERS_KEY) or {}, [h.lower() for h in required_headers])
    if missing_headers:
        error_message = f"missing header(s) '{','.join(missing_headers)}'"

    missing_params = _get_missing_keys(params, required_params)
    if missing_params:
        error_message = f"{error_message} and " if error_message else ""
        error_message += f"missing parameter(s) '{','.join(missing_params)}'"

    return error_message


def get_bearer_token(params: Dict[str, Any]) -> Optional[str]:
    authorization = (params.get(HEADERS_KEY) or {}).get("authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return None


def authorization_error(params: Dict[str, Any], log=None) -> Optional[Dict[str, Any]]:
    """Return a 401 result for HTTP requests that carry no bearer token, None otherwise.

    Only HTTP requests have a headers entry; direct invokes are already
    authorized by IAM.
    """
    if HEADERS_KEY not in params:
        return None

    error_message = check_missing_request_inputs(params, required_headers=["authorization"])
    if not error_message and not get_bearer_token(params):
        error_message = "authorization header must be a Bearer token"
    if error_message:
        return error_response(401, error_message, log)
    return None


def error_response(status_code: int, error: str, log=None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build an error result and log it at info level."""
    (log or logger).info("%s: %s", status_code, error)
    return {
        "statusCode": status_code,
        "body": {
            "message": message or DEFAULT_ERROR_MESSAGES.get(status_code, "Error processing request"),
            "error": error,
        },
    }


def challenge_response(params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Echo the I/O Events webhook verification challenge, if this is one."""
    if params.get("challenge"):
        return {"statusCode": 200, "body": {"challenge": params["challenge"]}}
    return None


def strip_internal_params(params: Dict[str, Any]) -> Dict[str, Any]:
    clean = {key: value for key, value in params.items() if not key.startswith("__")}
    stripped = len(params) - len(clean)
    if stripped:
        logger.debug("Stripped %d internal parameters", stripped)
    return clean


def get_lambda_client():
    global _lambda_client
    if _lambda_client is None:
        _lambda_client = boto3.client("lambda")
    return _lambda_client


def invoke_action(function_name: str, params: Dict[str, Any], lambda_client=None) -> Any:
    """Invoke another bridge Lambda synchronously and return its result."""
    client = lambda_client or get_lambda_client()
    response = client.invoke(
        FunctionName=function_name,
        InvocationType="RequestResponse",
        Payload=json.dumps(params, default=str).encode("utf-8"),
    )
    payload = response["Payload"].read()
    result = json.loads(payload) if payload else None

    if response.get("FunctionError"):
        error = result.get("errorMessage") if isinstance(result, dict) else result
        raise ActionInvocationError(f"{function_name} failed: {error}")
    return result


def route_to_handler(function_name: str, handler_name: str, params: Dict[str, Any], lambda_client=None) -> Dict[str, Any]:
    """Forward params to another handler, reporting the outcome instead of raising."""
    logger.debug("Invoking %s with params: %s", handler_name, string_parameters(params))
    try:
        result = invoke_action(function_name, params, lambda_client)
    except Exception as error:
        logger.exception("Error invoking %s", handler_name)
        return {"success": False, "handler": handler_name, "error": str(error)}

    logger.info("%s invocation successful", handler_name)
    return {"success": True, "handler": handler_name, "result": result}


def run_action(event: Dict[str, Any], main, log=None) -> Dict[str, Any]:
    """Lambda entry point plumbing: event -> params -> main(params) -> response."""
    try:
        params = extract_params(event)
    except ValueError as error:
        return http_response(event, error_response(400, str(error), log))
    return http_response(event, main(params))
