"""Agency Event Handler Lambda.

Entry point for every event an agency sends to the brand. Events must carry
a type, a data payload and the sender's app_runtime_info; they are routed
to internal handlers by type prefix.

Environment variables (set by CDK):
  ASSET_SYNC_INTERNAL_HANDLER_FUNCTION - function receiving assetsync events
"""
import logging
import os

from a2b.common import (
    check_missing_request_inputs,
    error_response,
    route_to_handler,
    run_action,
    string_parameters,
)
from a2b.constants import ASSET_SYNC_EVENT_PREFIX

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

ASSET_SYNC_INTERNAL_HANDLER_FUNCTION = os.environ.get(
    "ASSET_SYNC_INTERNAL_HANDLER_FUNCTION", "a2b-agency-assetsync-internal-handler"
)
ASSET_SYNC_INTERNAL_HANDLER = "agency-assetsync-internal-handler"


def main(params):
    try:
        logger.debug(string_parameters(params))
        error_message = check_missing_request_inputs(params, ["APPLICATION_RUNTIME_INFO", "type", "data"])
        if error_message:
            return error_response(400, error_message, logger)

        data = params["data"]
        if not isinstance(data, dict) or not data.get("app_runtime_info"):
            logger.error("Missing app_runtime_info in event data")
            return error_response(400, "Missing app_runtime_info in event data", logger)

        event_type = params["type"]
        logger.info("Processing agency event: %s", event_type)

        if event_type.startswith(ASSET_SYNC_EVENT_PREFIX):
            logger.info("Routing assetsync event to %s: %s", ASSET_SYNC_INTERNAL_HANDLER, event_type)
            routing_result = route_to_handler(ASSET_SYNC_INTERNAL_HANDLER_FUNCTION, ASSET_SYNC_INTERNAL_HANDLER, params)
        else:
            logger.warning("Unhandled event type: %s", event_type)
            return {
                "statusCode": 200,
                "body": {
                    "message": "Agency event processed - unhandled type",
                    "eventType": event_type,
                    "note": "Event type not configured for routing",
                },
            }

        return {
            "statusCode": 200,
            "body": {
                "message": "Agency event processed successfully",
                "eventType": event_type,
                "routingResult": routing_result,
            },
        }
    except Exception as error:
        logger.exception("Error processing agency event")
        return error_response(500, str(error), logger, message="Error processing agency event")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
