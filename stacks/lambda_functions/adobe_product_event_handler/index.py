"""Adobe Product Event Handler Lambda.

Receives events from Adobe products (AEM today) through an I/O Events
webhook registration and routes them to the internal handler for their
event type. Unrouted types are acknowledged with a 200 so I/O does not
retry them.

Environment variables (set by CDK):
  ASSET_SYNC_EVENT_HANDLER_FUNCTION - function receiving AEM asset events
  APPLICATION_RUNTIME_INFO          - JSON {consoleId, projectName, workspace}
"""
import logging
import os

from a2b.common import (
    challenge_response,
    check_missing_request_inputs,
    error_response,
    route_to_handler,
    run_action,
    string_parameters,
    strip_internal_params,
)
from a2b.constants import AEM_ASSET_EVENT_TYPES

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

ASSET_SYNC_EVENT_HANDLER_FUNCTION = os.environ.get(
    "ASSET_SYNC_EVENT_HANDLER_FUNCTION", "a2b-agency-assetsync-event-handler"
)
ASSET_SYNC_EVENT_HANDLER = "agency-assetsync-event-handler"


def main(params):
    try:
        logger.debug(string_parameters(params))
        error_message = check_missing_request_inputs(params, ["APPLICATION_RUNTIME_INFO"])
        if error_message:
            return error_response(400, error_message, logger)

        challenge = challenge_response(params)
        if challenge:
            return challenge

        event_type = params.get("type")
        if not event_type:
            logger.warning("No event type provided, cannot route event")
            return {
                "statusCode": 400,
                "body": {
                    "message": "No event type provided",
                    "error": "Event type is required for routing",
                },
            }

        logger.info("Processing Adobe product event: %s", event_type)

        if event_type in AEM_ASSET_EVENT_TYPES:
            logger.info("Routing AEM asset event to %s: %s", ASSET_SYNC_EVENT_HANDLER, event_type)
            routing_result = route_to_handler(
                ASSET_SYNC_EVENT_HANDLER_FUNCTION, ASSET_SYNC_EVENT_HANDLER, strip_internal_params(params)
            )
        else:
            logger.warning("Unhandled event type: %s", event_type)
            return {
                "statusCode": 200,
                "body": {
                    "message": "Adobe product event processed - unhandled type",
                    "eventType": event_type,
                    "note": "Event type not configured for routing",
                },
            }

        return {
            "statusCode": 200,
            "body": {
                "message": "Adobe product event processed successfully",
                "eventType": event_type,
                "routingResult": routing_result,
            },
        }
    except Exception as error:
        logger.exception("Error processing Adobe product event")
        return error_response(500, str(error), logger, message="Error processing Adobe product event")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
