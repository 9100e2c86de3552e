"""Custom events published on Adobe I/O Events.

Each event wraps a type string and a data payload, knows which data fields
it needs before it can be published, and serializes to a structured
CloudEvent (specversion 1.0) envelope.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    ASSET_SYNC_DELETED,
    ASSET_SYNC_NEW,
    ASSET_SYNC_UPDATED,
    REGISTRATION_DISABLED,
    REGISTRATION_ENABLED,
    REGISTRATION_RECEIVED,
)

CLOUD_EVENTS_SPEC_VERSION = "1.0"


class IoEvent:
    type: str = ""
    required_fields: Tuple[str, ...] = ()

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})
        self.datacontenttype = "application/json"
        self.source: Optional[str] = None
        self.id: Optional[str] = None
        self.brandId: Optional[str] = self.data.get("brandId")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type} id={self.id} brandId={self.brandId}>"

    def missing_fields(self) -> List[str]:
        data = self.data_with_brand_id()
        return [name for name in self.required_fields if data.get(name) is None]

    def validate(self) -> bool:
        return not self.missing_fields()

    def set_source(self, provider_id: str) -> None:
        self.source = f"urn:uuid:{provider_id}"

    def set_brand_id(self, brand_id: str) -> None:
        self.brandId = brand_id

    def data_with_brand_id(self) -> Dict[str, Any]:
        data = dict(self.data)
        if self.brandId is not None:
            data["brandId"] = self.brandId
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "type": self.type,
            "datacontenttype": self.datacontenttype,
            "id": self.id,
            "data": self.data_with_brand_id(),
        }

    def to_cloud_event(self) -> Dict[str, Any]:
        envelope = self.to_dict()
        envelope["specversion"] = CLOUD_EVENTS_SPEC_VERSION
        envelope["time"] = datetime.now(timezone.utc).isoformat()
        return envelope


class BrandRegistrationEvent(IoEvent):
    required_fields = ("bid", "brandId", "secret", "name", "endPointUrl", "enabled")

    def __init__(self, brand):
        # accepts a Brand or its dict form
        data = brand.to_dict() if hasattr(brand, "to_dict") else dict(brand)
        data["brandId"] = data.get("bid")
        super().__init__(data)

    def missing_fields(self) -> List[str]:
        missing = super().missing_fields()
        if "enabled" not in missing and not isinstance(self.data.get("enabled"), bool):
            missing.append("enabled")
        return missing


class NewBrandRegistrationEvent(BrandRegistrationEvent):
    type = REGISTRATION_RECEIVED


class BrandEnabledEvent(BrandRegistrationEvent):
    type = REGISTRATION_ENABLED


class BrandDisabledEvent(BrandRegistrationEvent):
    type = REGISTRATION_DISABLED


class AssetSyncNewEvent(IoEvent):
    type = ASSET_SYNC_NEW
    required_fields = ("brandId", "asset_id", "asset_path", "metadata")


class AssetSyncUpdateEvent(IoEvent):
    type = ASSET_SYNC_UPDATED
    required_fields = ("brandId", "asset_id", "asset_path", "metadata")


class AssetSyncDeleteEvent(IoEvent):
    type = ASSET_SYNC_DELETED
    required_fields = ("brandId", "asset_id", "asset_path")


ASSET_SYNC_EVENTS = {
    ASSET_SYNC_NEW: AssetSyncNewEvent,
    ASSET_SYNC_UPDATED: AssetSyncUpdateEvent,
    ASSET_SYNC_DELETED: AssetSyncDeleteEvent,
}


def event_from_type(event_type: str, data: Dict[str, Any]) -> IoEvent:
    """Build the asset sync event matching an incoming type string."""
    try:
        event_class = ASSET_SYNC_EVENTS[event_type]
    except KeyError:
        raise ValueError(f"Unsupported assetsync event type: {event_type}") from None
    return event_class(data)
