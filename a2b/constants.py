"""Constants shared by the bridge Lambdas."""

DEFAULT_ERROR_MESSAGES = {
    400: "Invalid request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    500: "Error processing request",
}

BRAND_STATE_PREFIX = "BRAND_"
BRAND_FILE_STORE_DIR = "brand"

# Event type strings published on / received from Adobe I/O Events
REGISTRATION_EVENT_PREFIX = "com.adobe.a2b.registration"
ASSET_SYNC_EVENT_PREFIX = "com.adobe.a2b.assetsync"

REGISTRATION_RECEIVED = "com.adobe.a2b.registration.received"
REGISTRATION_ENABLED = "com.adobe.a2b.registration.enabled"
REGISTRATION_DISABLED = "com.adobe.a2b.registration.disabled"
ASSET_SYNC_NEW = "com.adobe.a2b.assetsync.new"
ASSET_SYNC_UPDATED = "com.adobe.a2b.assetsync.updated"
ASSET_SYNC_DELETED = "com.adobe.a2b.assetsync.deleted"

AEM_ASSET_CREATED = "aem.assets.asset.created"
AEM_ASSET_UPDATED = "aem.assets.asset.updated"
AEM_ASSET_DELETED = "aem.assets.asset.deleted"
AEM_ASSET_METADATA_UPDATED = "aem.assets.asset.metadata_updated"
AEM_ASSET_EVENT_TYPES = (
    AEM_ASSET_CREATED,
    AEM_ASSET_UPDATED,
    AEM_ASSET_DELETED,
    AEM_ASSET_METADATA_UPDATED,
)

# AEM asset metadata properties that drive the sync
AEM_SYNC_ON_CHANGE = "a2b__synch_on_change"
AEM_CUSTOMERS = "a2d__customers"
AEM_LAST_SYNC = "a2d__last_sync"

# Max lifetime of a cached IMS token (22 minutes)
TOKEN_CACHE_TTL_SECONDS = 1320
