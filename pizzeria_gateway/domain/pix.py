"""Static PIX "Copia e Cola" payload assembly"""

import re
import unicodedata
from decimal import Decimal, ROUND_HALF_UP, localcontext
from pizzeria_gateway.domain.brcode import crc16, format_field, CRC_FIELD_PREFIX

PIX_GUI = "BR.GOV.BCB.PIX"

# Wire limits from the BR Code manual
MAX_PIX_KEY_LENGTH = 77
MAX_MERCHANT_NAME_LENGTH = 25
MAX_MERCHANT_CITY_LENGTH = 15
MAX_TX_ID_LENGTH = 25

TX_ID_PREFIX = "PED"
TX_ID_ORDER_CHARS = 20

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def normalize_text(value: str, max_length: int) -> str:
    """Uppercase ASCII rendition of value: diacritics stripped, unsupported chars dropped"""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    ascii_only = stripped.upper().encode("ascii", "ignore").decode("ascii")
    return ascii_only[:max_length]


def format_amount(amount: Decimal | float | int | str) -> str:
    """
    Render amount with exactly 2 decimals and '.' separator (23.5 -> "23.50").

    Raises:
        ValueError: amount is NaN or infinite (caller contract, like format_field's length check)
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Amount must be a finite number, got {amount!r}")

    # Enough digits for the integer part plus cents, however large the amount
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        quantized = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{quantized:f}"


def truncate_utf8(value: str, max_bytes: int) -> str:
    """Cut value to at most max_bytes of UTF-8 without splitting a character"""
    return value.encode("utf-8")[:max_bytes].decode("utf-8", "ignore")


def build_static_pix_payload(
    pix_key: str,
    merchant_name: str,
    merchant_city: str,
    amount: Decimal | float | int | str,
    tx_id: str,
) -> str:
    """
    Build a static (reusable) PIX payload with CRC16 trailer.

    Field order is part of the wire contract:
    00 format, 01 initiation, 26 account (GUI + key), 52 MCC, 53 currency,
    54 amount, 58 country, 59 name, 60 city, 62 additional data (txid), 63 CRC.

    Oversized values are truncated to their wire limits. Amount is not
    range-checked; callers reject zero or negative totals before calling.
    """
    merchant_account = format_field("00", PIX_GUI) + format_field("01", truncate_utf8(pix_key or "", MAX_PIX_KEY_LENGTH))
    additional_data = format_field("05", truncate_utf8(tx_id or "", MAX_TX_ID_LENGTH))

    payload = "".join(
        [
            format_field("00", "01"),
            format_field("01", "12"),
            format_field("26", merchant_account),
            format_field("52", "0000"),
            format_field("53", "986"),
            format_field("54", format_amount(amount)),
            format_field("58", "BR"),
            format_field("59", normalize_text(merchant_name, MAX_MERCHANT_NAME_LENGTH)),
            format_field("60", normalize_text(merchant_city, MAX_MERCHANT_CITY_LENGTH)),
            format_field("62", additional_data),
            CRC_FIELD_PREFIX,
        ]
    )
    return payload + crc16(payload)


def derive_tx_id(order_id: str) -> str:
    """Transaction id for an order: "PED" + first 20 alphanumeric chars of the id"""
    return TX_ID_PREFIX + _NON_ALPHANUMERIC.sub("", str(order_id))[:TX_ID_ORDER_CHARS]


def mask_pix_key(pix_key: str | None) -> str:
    """Keep the first 4 characters of a PIX key, hide the rest"""
    return (pix_key or "****")[:4] + "****"
