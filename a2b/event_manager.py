"""Publishing of bridge events onto the Adobe I/O Event Hub.

EventManager is what the handlers use; IoCustomEventManager does the actual
work of picking the event provider, stamping id/source, fetching an IMS
token and posting the CloudEvent to the I/O Events ingress endpoint.

Environment variables (set by CDK):
  AIO_AGENCY_EVENTS_REGISTRATION_PROVIDER_ID     - provider for registration events
  AIO_AGENCY_EVENTS_AEM_ASSET_SYNC_PROVIDER_ID   - provider for asset sync events
  AIO_EVENTS_INGRESS_URL                         - I/O Events publish endpoint
"""
import json
import logging
import os
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import requests

from .auth import S2SAuthenticationCredentials, get_server_to_server_token
from .constants import ASSET_SYNC_EVENT_PREFIX, REGISTRATION_EVENT_PREFIX
from .errors import EventPublishError, EventValidationError, MissingCredentialsError
from .io_events import IoEvent
from .stores import StateStore

logger = logging.getLogger(__name__)

AIO_EVENTS_INGRESS_URL = os.environ.get("AIO_EVENTS_INGRESS_URL", "https://eventsingress.adobe.io")
REQUEST_TIMEOUT_SECONDS = 30


@dataclass
class ApplicationRuntimeInfo:
    consoleId: str = ""
    projectName: str = ""
    workspace: str = ""

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "ApplicationRuntimeInfo":
        raw = params.get("APPLICATION_RUNTIME_INFO")
        if not raw:
            raise ValueError("Missing APPLICATION_RUNTIME_INFO parameter")
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as error:
                raise ValueError(f"APPLICATION_RUNTIME_INFO is not valid JSON: {error}") from error

        return cls(
            consoleId=str(raw.get("consoleId", "")),
            projectName=str(raw.get("projectName", "")),
            workspace=str(raw.get("workspace", "")),
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class IoCustomEventManager:
    def __init__(
        self,
        credentials: S2SAuthenticationCredentials,
        state_store: Optional[StateStore] = None,
        registration_provider_id: Optional[str] = None,
        asset_sync_provider_id: Optional[str] = None,
    ):
        if not credentials.is_complete():
            logger.error("IoCustomEventManager credentials missing: %r", credentials)
            raise MissingCredentialsError(
                "IoCustomEventManager needs S2S_CLIENT_ID, S2S_CLIENT_SECRET, S2S_SCOPES and ORG_ID"
            )

        self.credentials = credentials
        self.state_store = state_store
        self.registration_provider_id = registration_provider_id or os.environ.get(
            "AIO_AGENCY_EVENTS_REGISTRATION_PROVIDER_ID", ""
        )
        self.asset_sync_provider_id = asset_sync_provider_id or os.environ.get(
            "AIO_AGENCY_EVENTS_AEM_ASSET_SYNC_PROVIDER_ID", ""
        )

    def provider_id_for(self, event_type: str) -> str:
        if event_type.startswith(REGISTRATION_EVENT_PREFIX):
            provider_id = self.registration_provider_id
        elif event_type.startswith(ASSET_SYNC_EVENT_PREFIX):
            provider_id = self.asset_sync_provider_id
        else:
            raise EventValidationError(f"Event type not supported: {event_type}")

        if not provider_id:
            raise EventValidationError(f"No event provider configured for {event_type}")
        return provider_id

    def publish_event(self, event: IoEvent) -> None:
        event.set_source(self.provider_id_for(event.type))
        event.id = str(uuid.uuid4())

        missing = event.missing_fields()
        if missing:
            logger.error("Event %r is not valid, missing %s", event, missing)
            raise EventValidationError(f"Event is not valid, missing: {', '.join(missing)}")

        self.publish_event_to_adobe_event_hub(event)

    def publish_event_to_adobe_event_hub(self, event: IoEvent) -> None:
        token = get_server_to_server_token(self.credentials, self.state_store)

        headers = {
            "Authorization": f"Bearer {token}",
            "x-api-key": self.credentials.clientId,
            "x-ims-org-id": self.credentials.orgId,
            "Content-Type": "application/cloudevents+json",
        }
        cloud_event = event.to_cloud_event()
        logger.debug("Publishing cloud event %s", cloud_event.get("id"))

        try:
            response = requests.post(
                AIO_EVENTS_INGRESS_URL,
                data=json.dumps(cloud_event),
                headers=headers,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as error:
            raise EventPublishError(f"Error sending event {event.id}: {error}") from error

        if response.status_code == 200:
            logger.info("Published %s event %s", event.type, event.id)
        elif response.status_code == 204:
            logger.warning("Event %s accepted but no registration is listening for %s", event.id, event.type)
        else:
            logger.error("Error sending event %s: %s %s", event.id, response.status_code, response.text)
            raise EventPublishError(f"Error sending event {event.id}: status {response.status_code}")


class EventManager:
    def __init__(
        self,
        credentials: S2SAuthenticationCredentials,
        runtime_info: Optional[ApplicationRuntimeInfo] = None,
        state_store: Optional[StateStore] = None,
    ):
        self.credentials = credentials
        self.runtime_info = runtime_info
        self.io_custom_event_manager = IoCustomEventManager(credentials, state_store=state_store)

    @classmethod
    def from_params(cls, params: Dict[str, Any], state_store: Optional[StateStore] = None) -> "EventManager":
        credentials = cls.get_s2s_authentication_credentials(params)
        runtime_info = None
        if params.get("APPLICATION_RUNTIME_INFO"):
            runtime_info = cls.get_application_runtime_info(params)
        return cls(credentials, runtime_info, state_store=state_store)

    @staticmethod
    def get_s2s_authentication_credentials(params: Dict[str, Any]) -> S2SAuthenticationCredentials:
        return S2SAuthenticationCredentials.from_params(params)

    @staticmethod
    def get_application_runtime_info(params: Dict[str, Any]) -> ApplicationRuntimeInfo:
        return ApplicationRuntimeInfo.from_params(params)

    def publish_event(self, event: IoEvent) -> None:
        if self.runtime_info is not None:
            event.data.setdefault("app_runtime_info", self.runtime_info.to_dict())

        # every event is echoed on I/O; per-brand delivery to endPointUrl is not wired yet
        self.io_custom_event_manager.publish_event(event)
