import datetime
import enum
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from vanishingkeys.utils.clock import to_iso


class SecretStatus(enum.Enum):
    ACTIVE = "active"
    CONSUMED = "consumed"


class CreateResult(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class DeleteResult(enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"


class Secret(BaseModel):
    """
    A one-time-readable secret record, named the way it is persisted.

    TTL is a single epoch-seconds attribute with two meanings, because the
    backend's native expiry reaps on exactly one attribute:
        - ACTIVE (consumedAtTime is None): the validity deadline set at creation.
        - CONSUMED: the grace deadline after which the backend removes the record.
    """

    secretId: str
    encryptedSecret: Any
    createdTime: datetime.datetime
    lastUpdated: datetime.datetime
    consumedAtTime: Optional[datetime.datetime] = None
    TTL: int

    @field_validator("TTL", mode="before")
    @classmethod
    def coerce_ttl(cls, value):
        # DynamoDB numbers come back as Decimal
        if isinstance(value, (Decimal, float)):
            return int(value)
        return value

    @field_validator("createdTime", "lastUpdated", "consumedAtTime")
    @classmethod
    def ensure_utc(cls, value):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value

    @property
    def status(self) -> SecretStatus:
        if self.consumedAtTime is None:
            return SecretStatus.ACTIVE
        return SecretStatus.CONSUMED

    @property
    def expires_at(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.TTL, tz=datetime.timezone.utc)

    def is_expired(self, now: datetime.datetime) -> bool:
        """Logical expiry: true once now is past TTL, whether or not the row was reaped."""
        return self.expires_at < now

    def to_item(self) -> dict:
        return {
            "secretId": self.secretId,
            "encryptedSecret": self.encryptedSecret,
            "createdTime": to_iso(self.createdTime),
            "lastUpdated": to_iso(self.lastUpdated),
            "consumedAtTime": (
                to_iso(self.consumedAtTime) if self.consumedAtTime else None
            ),
            "TTL": self.TTL,
        }

    @classmethod
    def from_item(cls, item: dict) -> "Secret":
        return cls(**item)
