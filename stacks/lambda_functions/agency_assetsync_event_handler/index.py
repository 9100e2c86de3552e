"""Agency Asset Sync Event Handler Lambda.

Receives AEM asset events (forwarded by the Adobe product event handler, or
directly from an I/O Events webhook) and decides whether the asset has to be
synced to agencies. An asset is synced when its metadata carries
a2b__synch_on_change = "true" and a comma separated a2d__customers list of
brand ids; one asset sync event is published per brand, and a2d__last_sync
is stamped on the asset afterwards.
"""
import logging
import os
from datetime import datetime, timezone

from a2b.aem import add_metadata_to_aem_asset, get_aem_asset_data, get_aem_asset_presigned_download_url
from a2b.common import (
    challenge_response,
    check_missing_request_inputs,
    error_response,
    run_action,
    string_parameters,
)
from a2b.constants import (
    AEM_ASSET_DELETED,
    AEM_ASSET_METADATA_UPDATED,
    AEM_CUSTOMERS,
    AEM_LAST_SYNC,
    AEM_SYNC_ON_CHANGE,
)
from a2b.event_manager import EventManager
from a2b.io_events import AssetSyncNewEvent, AssetSyncUpdateEvent
from a2b.stores import StateStore

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

state_store = StateStore()


def _customer_brand_ids(raw):
    if isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = str(raw).split(",")
    return [item.strip() for item in items if item and item.strip()]


def sync_asset(params, event_manager):
    """Publish asset sync events for every brand listed on the asset.

    Returns a summary of the published events, empty when the asset is not
    flagged for sync.
    """
    repository = params["data"]["repositoryMetadata"]
    aem_host = f"https://{repository['repo:repositoryId']}"
    aem_asset_path = repository["repo:path"]

    asset = get_aem_asset_data(aem_host, aem_asset_path, params, state_store)
    metadata = (asset.get("jcr:content") or {}).get("metadata")
    if not metadata:
        logger.warning("Asset metadata not found for %s", aem_asset_path)
        return []

    if metadata.get(AEM_SYNC_ON_CHANGE) != "true" or not metadata.get(AEM_CUSTOMERS):
        logger.info("Asset %s is not flagged for sync", aem_asset_path)
        return []

    brand_ids = _customer_brand_ids(metadata[AEM_CUSTOMERS])
    presigned_url = get_aem_asset_presigned_download_url(aem_host, aem_asset_path, params, state_store)

    # assets synced before go out as updates
    event_class = AssetSyncUpdateEvent if metadata.get(AEM_LAST_SYNC) else AssetSyncNewEvent

    published = []
    for brand_id in brand_ids:
        event = event_class({
            "brandId": brand_id,
            "asset_id": asset.get("jcr:uuid"),
            "asset_path": aem_asset_path,
            "metadata": metadata,
            "asset_presigned_url": presigned_url,
        })
        event_manager.publish_event(event)
        logger.info("Published %s for brand %s", event.type, brand_id)
        published.append({"brandId": brand_id, "type": event.type, "id": event.id})

    synced_at = datetime.now(timezone.utc).isoformat()
    add_metadata_to_aem_asset(aem_host, aem_asset_path, f"/{AEM_LAST_SYNC}", synced_at, params, state_store)
    return published


def main(params):
    challenge = challenge_response(params)
    if challenge:
        return challenge

    logger.debug(string_parameters(params))
    error_message = check_missing_request_inputs(params, ["APPLICATION_RUNTIME_INFO"])
    if error_message:
        return error_response(400, error_message, logger)

    try:
        event_manager = EventManager.from_params(params, state_store=state_store)
    except Exception:
        logger.exception("Error setting up the event manager")
        return error_response(500, "Error Handling Event", logger)

    try:
        event_type = params.get("type")
        published = []

        if event_type == AEM_ASSET_DELETED:
            # TODO: publish AssetSyncDeleteEvent once the brands an asset was synced to are recorded
            logger.info("Asset deleted event for %s", (params.get("data") or {}).get("repositoryMetadata"))
        elif event_type == AEM_ASSET_METADATA_UPDATED:
            logger.info("Asset metadata updated event")
            error_message = check_missing_request_inputs(
                params, ["data.repositoryMetadata.repo:repositoryId", "data.repositoryMetadata.repo:path"]
            )
            if error_message:
                return error_response(400, error_message, logger)
            published = sync_asset(params, event_manager)
        else:
            logger.info("Asset event not handled: %s", event_type)

        return {
            "statusCode": 200,
            "body": {
                "message": "Asset event processed successfully",
                "eventType": event_type,
                "published": published,
            },
        }
    except Exception as error:
        logger.exception("Error processing asset event")
        return error_response(500, str(error), logger, message="Error processing IO event")


def lambda_handler(event, _context):
    return run_action(event, main, logger)
