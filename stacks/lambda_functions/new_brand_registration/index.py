"""New Brand Registration Lambda.

Called by the admin UI when an agency registers a brand. Creates a disabled
Brand with a fresh id and shared secret, stores it, and announces it with a
com.adobe.a2b.registration.received event.
Function URL requests need an IMS bearer token.
"""
import logging
import os

from a2b.brand import Brand
from a2b.brand_manager import BrandManager
from a2b.common import (
    authorization_error,
    check_missing_request_inputs,
    error_response,
    run_action,
    string_parameters,
)
from a2b.event_manager import EventManager
from a2b.io_events import NewBrandRegistrationEvent
from a2b.stores import StateStore

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

state_store = StateStore()
brand_manager = BrandManager(state_store=state_store)


def main(params):
    try:
        logger.debug(string_parameters(params))
        unauthorized = authorization_error(params, logger)
        if unauthorized:
            return unauthorized

        error_message = check_missing_request_inputs(params, ["name", "endPointUrl"])
        if error_message:
            return error_response(400, error_message, logger)

        try:
            brand = brand_manager.save_brand(Brand.new(params["name"], params["endPointUrl"]))
        except Exception:
            logger.exception("Error saving brand")
            return error_response(500, "Error saving brand", logger)

        # the brand stays registered even if the announcement fails
        try:
            event_manager = EventManager.from_params(params, state_store=state_store)
            event_manager.publish_event(NewBrandRegistrationEvent(brand))
        except Exception:
            logger.exception("Error sending registration event for brand %s", brand.bid)
            return error_response(500, "Error handling event", logger)

        return {
            "statusCode": 200,
            "body": {
                "message": f"Brand registration processed successfully for brand id {brand.bid}",
                "brand": brand.to_dict(),
            },
        }
    except Exception as error:
        logger.exception("Error processing new brand registration")
        return error_response(500, str(error), logger, message="Error processing new client registration")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
