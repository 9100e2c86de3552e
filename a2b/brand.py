"""Brand registration record."""
import json
import secrets
import string
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SECRET_LENGTH = 32
_SECRET_ALPHABET = string.ascii_letters + string.digits


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        # datetime.fromisoformat() only accepts a trailing "Z" from 3.11 on
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def generate_secret(length: int = SECRET_LENGTH) -> str:
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))


@dataclass
class Brand:
    bid: str = ""
    secret: str = ""
    name: str = ""
    endPointUrl: str = ""
    enabled: bool = False
    createdAt: datetime = field(default_factory=_utcnow)
    updatedAt: datetime = field(default_factory=_utcnow)
    enabledAt: Optional[datetime] = None

    @classmethod
    def new(cls, name: str, end_point_url: str) -> "Brand":
        """Create a disabled brand with a fresh id and shared secret."""
        return cls(
            bid=str(uuid.uuid4()),
            secret=generate_secret(),
            name=name,
            endPointUrl=end_point_url,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Brand":
        """Build a Brand from a dict, ignoring keys that are not brand fields."""
        if not isinstance(data, dict):
            raise ValueError("Brand data must be a JSON object")

        return cls(
            bid=str(data.get("bid") or ""),
            secret=str(data.get("secret") or ""),
            name=str(data.get("name") or ""),
            endPointUrl=str(data.get("endPointUrl") or ""),
            enabled=bool(data.get("enabled") or False),
            createdAt=_parse_datetime(data.get("createdAt")) or _utcnow(),
            updatedAt=_parse_datetime(data.get("updatedAt")) or _utcnow(),
            enabledAt=_parse_datetime(data.get("enabledAt")),
        )

    @classmethod
    def from_json(cls, raw) -> "Brand":
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return cls.from_dict(json.loads(raw))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bid": self.bid,
            "secret": self.secret,
            "name": self.name,
            "endPointUrl": self.endPointUrl,
            "enabled": self.enabled,
            "createdAt": _format_datetime(self.createdAt),
            "updatedAt": _format_datetime(self.updatedAt),
            "enabledAt": _format_datetime(self.enabledAt),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def enable(self) -> None:
        now = _utcnow()
        self.enabled = True
        self.enabledAt = now
        self.updatedAt = now

    def disable(self) -> None:
        self.enabled = False
        self.enabledAt = None
        self.updatedAt = _utcnow()
