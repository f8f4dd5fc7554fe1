"""Wire schemas for the platform API collections (members, executives, package stats)."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import Field, field_validator

from src.shared.schemas.base import BaseSchema, CamelSchema


class MemberRole(str, Enum):
    USER = "USER"
    MENTOR = "Mentor"
    ADMIN = "ADMIN"


def _lenient_datetime(v):
    """Unparseable timestamps become None instead of failing the record."""
    if v is None or isinstance(v, datetime):
        return v
    if isinstance(v, (int, float)):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(v / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(v, str):
        raw = v.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None


def _blank_to_none(v):
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def _as_int(v):
    if v is None or isinstance(v, bool):
        return 0
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return 0


class Member(CamelSchema):
    """Enrolled platform user (any role) as returned by /admin/getallusers."""

    id: str | None = Field(default=None, alias="_id")
    name: str = ""
    email: str = ""
    tier_name: str | None = Field(default=None, alias="packageName")
    # Upstream spells this field "executiveRefode"
    referral_code: str | None = Field(default=None, alias="executiveRefode")
    coin_balance: int = Field(default=0, alias="coins")
    created_at: datetime | None = None
    joined_at: datetime | None = None
    role: str = MemberRole.USER.value
    is_banned: bool = False

    @field_validator("created_at", "joined_at", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _lenient_datetime(v)

    @field_validator("tier_name", "referral_code", mode="before")
    @classmethod
    def blank_codes(cls, v):
        return _blank_to_none(v)

    @field_validator("coin_balance", mode="before")
    @classmethod
    def parse_coins(cls, v):
        return _as_int(v)

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        return None if v is None else str(v)

    @field_validator("name", "email", "role", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("is_banned", mode="before")
    @classmethod
    def banned_flag(cls, v):
        return bool(v)


class Agent(CamelSchema):
    """Referral executive as returned by /executive/get-executives."""

    id: str | None = Field(default=None, alias="_id")
    name: str = ""
    email: str = ""
    referral_code: str | None = None
    joined_at: datetime | None = None
    is_banned: bool = False

    @field_validator("joined_at", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _lenient_datetime(v)

    @field_validator("referral_code", mode="before")
    @classmethod
    def blank_codes(cls, v):
        return _blank_to_none(v)

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        return None if v is None else str(v)

    @field_validator("name", "email", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("is_banned", mode="before")
    @classmethod
    def banned_flag(cls, v):
        return bool(v)


class TierPriceEntry(CamelSchema):
    """Per-package price and platform-wide aggregates from /package/admin/package-stats."""

    tier_name: str = Field(default="", alias="packageName")
    price_in_coins: int = 0
    current_active_users: int = 0
    total_purchases: int = 0
    current_revenue: int = 0
    total_revenue: int = 0

    @field_validator(
        "price_in_coins",
        "current_active_users",
        "total_purchases",
        "current_revenue",
        "total_revenue",
        mode="before",
    )
    @classmethod
    def parse_ints(cls, v):
        return _as_int(v)

    @field_validator("tier_name", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else str(v)


class PlatformSnapshot(BaseSchema):
    """All three collections for one report run."""

    members: list[Member] = []
    agents: list[Agent] = []
    tier_prices: list[TierPriceEntry] = []
