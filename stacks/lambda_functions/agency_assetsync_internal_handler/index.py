"""Agency Asset Sync Internal Handler Lambda.

Invoked by the agency event handler for com.adobe.a2b.assetsync.* events.
Builds the matching asset sync event and publishes it on I/O Events.
"""
import logging
import os

from a2b.common import check_missing_request_inputs, error_response, run_action, string_parameters
from a2b.event_manager import EventManager
from a2b.io_events import event_from_type
from a2b.stores import StateStore

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

state_store = StateStore()


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
        logger.info("Processing assetsync event: %s", event_type)

        try:
            event = event_from_type(event_type, data)
        except ValueError as error:
            logger.error("Unsupported assetsync event type: %s", event_type)
            return error_response(400, str(error), logger)

        try:
            event_manager = EventManager.from_params(params, state_store=state_store)
            event_manager.publish_event(event)
        except Exception:
            logger.exception("Error publishing assetsync event")
            return error_response(500, "Error publishing assetsync event", logger)

        logger.info("Assetsync event published successfully: %s", event_type)
        return {
            "statusCode": 200,
            "body": {
                "message": "Assetsync event processed successfully",
                "eventType": event_type,
                "assetId": data.get("asset_id") or "unknown",
            },
        }
    except Exception as error:
        logger.exception("Error processing assetsync event")
        return error_response(500, str(error), logger, message="Error processing assetsync event")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
