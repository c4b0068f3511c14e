"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class PixMerchantConfig:
    """Receiving account used for static PIX payloads when store settings are blank"""

    pix_key: str = "12345678901"
    merchant_name: str = "PIZZARIA ITALIANA"
    merchant_city: str = "SAO PAULO"


@dataclass
class StoreSettings:
    """Store-level settings relevant to payments and opening status"""

    name: str | None = None
    pix_key: str | None = None
    pix_name: str | None = None
    is_open: bool = True


@dataclass
class PixResult:
    """Outcome of PIX generation for an order"""

    pix_code: str
    tx_id: str
    amount: Decimal
    provider: str  # "efipay" | "static" | "static_fallback"
    pix_key: str  # masked


@dataclass
class ParsedPixPayload:
    """Fields recovered from a static BR Code payload"""

    payload_format: str
    initiation_method: str | None
    gui: str | None
    pix_key: str | None
    merchant_category_code: str | None
    currency: str | None
    amount: str | None
    country_code: str | None
    merchant_name: str | None
    merchant_city: str | None
    tx_id: str | None
    crc: str
    crc_valid: bool


@dataclass(frozen=True)
class OperatingHour:
    """Opening window for one weekday (0=Sunday..6=Saturday)"""

    day: int
    open: str
    close: str
    enabled: bool

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Optional["OperatingHour"]:
        """
        Build an entry from a settings row or JSON object.

        Accepts the camelCase, snake_case and short spellings used by the
        storefront and the operating_hours table. Returns None when a
        required field is missing so the day is treated as closed.
        """
        day = _first_present(raw, "day", "dayOfWeek", "day_of_week")
        open_time = _first_present(raw, "open", "openTime", "open_time")
        close_time = _first_present(raw, "close", "closeTime", "close_time")
        enabled = _first_present(raw, "enabled", "isOpen", "is_open")

        if isinstance(day, bool) or not isinstance(day, int):
            return None
        if not open_time or not close_time:
            return None

        return cls(day=day, open=str(open_time), close=str(close_time), enabled=enabled is True)


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


@dataclass(frozen=True)
class SpecialClosure:
    """Calendar date on which the store stays closed all day"""

    closure_date: date
    reason: str | None = None
    id: int | None = None


@dataclass
class StoreStatus:
    """Combined view of manual switch and weekly schedule"""

    accepting_orders: bool
    open_by_schedule: bool
    manual_open: bool
    message: str | None
