"""Brand Admin Lambda.

Backs the admin UI's registration list: view registered brands and approve
(enable) or revoke (disable) them. Enabling or disabling a brand publishes
the matching registration event so agencies learn about it.

Operations (param "operation"): list, get, enable, disable, delete.
Function URL requests need an IMS bearer token; brand secrets are never returned.
"""
import logging
import os

from a2b.brand_manager import BrandManager
from a2b.common import (
    authorization_error,
    check_missing_request_inputs,
    error_response,
    run_action,
    string_parameters,
)
from a2b.errors import BrandNotFoundError
from a2b.event_manager import EventManager
from a2b.io_events import BrandDisabledEvent, BrandEnabledEvent
from a2b.stores import StateStore

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

state_store = StateStore()
brand_manager = BrandManager(state_store=state_store)

OPERATIONS_NEEDING_BID = ("get", "enable", "disable", "delete")


def _public(brand):
    # the shared secret is handed out once, by the registration response
    data = brand.to_dict()
    data.pop("secret", None)
    return data


def _list_brands(params):
    brands = sorted(brand_manager.get_all_brands(), key=lambda b: b.createdAt)
    return {
        "statusCode": 200,
        "body": {"message": f"Found {len(brands)} brands", "brands": [_public(b) for b in brands]},
    }


def _get_brand(params):
    brand = brand_manager.get_brand(params["bid"])
    return {"statusCode": 200, "body": {"message": "Brand found", "brand": _public(brand)}}


def _set_enabled(params, enabled):
    brand = brand_manager.get_brand(params["bid"])
    if enabled:
        brand.enable()
        event = BrandEnabledEvent(brand)
    else:
        brand.disable()
        event = BrandDisabledEvent(brand)
    brand_manager.save_brand(brand)

    try:
        EventManager.from_params(params, state_store=state_store).publish_event(event)
    except Exception:
        logger.exception("Error sending %s event for brand %s", event.type, brand.bid)
        return error_response(500, "Error handling event", logger)

    state = "enabled" if enabled else "disabled"
    return {"statusCode": 200, "body": {"message": f"Brand {brand.bid} {state}", "brand": _public(brand)}}


def _delete_brand(params):
    brand_manager.delete_brand(params["bid"])
    return {"statusCode": 200, "body": {"message": f"Brand {params['bid']} deleted"}}


OPERATIONS = {
    "list": _list_brands,
    "get": _get_brand,
    "enable": lambda params: _set_enabled(params, True),
    "disable": lambda params: _set_enabled(params, False),
    "delete": _delete_brand,
}


def main(params):
    try:
        logger.debug(string_parameters(params))
        unauthorized = authorization_error(params, logger)
        if unauthorized:
            return unauthorized

        error_message = check_missing_request_inputs(params, ["operation"])
        if error_message:
            return error_response(400, error_message, logger)

        operation = params["operation"]
        if operation not in OPERATIONS:
            return error_response(400, f"Unsupported operation: {operation}", logger)

        if operation in OPERATIONS_NEEDING_BID:
            error_message = check_missing_request_inputs(params, ["bid"])
            if error_message:
                return error_response(400, error_message, logger)

        logger.info("Brand admin operation: %s", operation)
        return OPERATIONS[operation](params)
    except BrandNotFoundError as error:
        return error_response(404, str(error), logger)
    except Exception as error:
        logger.exception("Error processing brand admin request")
        return error_response(500, str(error), logger, message="Error processing brand admin request")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
