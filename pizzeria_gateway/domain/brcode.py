"""BR Code (EMV QR) primitives: CRC16-CCITT-FALSE and TLV fields"""

from typing import Dict
from pizzeria_gateway.domain.exceptions import InvalidPayloadError
from pizzeria_gateway.domain.models import ParsedPixPayload

CRC16_POLYNOMIAL = 0x1021
CRC16_INITIAL = 0xFFFF

# Field 63 header; the checksum is computed over the payload including it
CRC_FIELD_PREFIX = "6304"

MAX_FIELD_LENGTH = 99


def crc16(data: str) -> str:
    """
    CRC16-CCITT-FALSE as required by the BR Code standard.

    Init 0xFFFF, polynomial 0x1021, no reflection, no final XOR.
    Returns 4 uppercase hex digits, zero-padded.

    Example:
        crc16("123456789") == "29B1"
    """
    crc = CRC16_INITIAL
    for byte in data.encode("utf-8"):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ CRC16_POLYNOMIAL) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def format_field(field_id: str, value: str) -> str:
    """
    Serialize one TLV field as id + 2-digit byte length + value.

    Nested templates are passed in already serialized; their length is
    measured on the inner string like any other value.

    Raises:
        ValueError: If value exceeds 99 bytes (callers truncate first)
    """
    length = len(value.encode("utf-8"))
    if length > MAX_FIELD_LENGTH:
        raise ValueError(f"Field {field_id} value is {length} bytes, max is {MAX_FIELD_LENGTH}")
    return f"{field_id}{length:02d}{value}"


def parse_fields(payload: str) -> Dict[str, str]:
    """
    Decode a single TLV level into {field_id: value}.

    Lengths are UTF-8 byte counts, matching format_field.

    Raises:
        InvalidPayloadError: On a truncated field, non-numeric length or split character
    """
    data = payload.encode("utf-8")
    fields: Dict[str, str] = {}
    index = 0
    while index < len(data):
        if index + 4 > len(data):
            raise InvalidPayloadError(f"Truncated field header at position {index}")

        header = data[index:index + 4].decode("ascii", "replace")
        field_id, length_str = header[:2], header[2:]
        if not length_str.isdigit():
            raise InvalidPayloadError(f"Non-numeric length {length_str!r} for field {field_id}")

        length = int(length_str)
        end = index + 4 + length
        if end > len(data):
            raise InvalidPayloadError(f"Field {field_id} declares {length} bytes past end of payload")

        try:
            fields[field_id] = data[index + 4:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPayloadError(f"Field {field_id} splits a multi-byte character") from e
        index = end

    return fields


def parse_pix_payload(payload: str) -> ParsedPixPayload:
    """
    Decode a static PIX payload, including the nested 26 and 62 templates.

    The CRC is recomputed over everything but the last 4 characters and
    compared with the trailing checksum.

    Raises:
        InvalidPayloadError: If the payload is malformed or has no CRC field
    """
    fields = parse_fields(payload)
    if "00" not in fields or "63" not in fields:
        raise InvalidPayloadError("Payload must start with field 00 and end with field 63")
    if not payload.endswith(fields["63"]) or len(fields["63"]) != 4:
        raise InvalidPayloadError("CRC field must be the last 4-character field")

    account = parse_fields(fields["26"]) if "26" in fields else {}
    additional = parse_fields(fields["62"]) if "62" in fields else {}

    return ParsedPixPayload(
        payload_format=fields["00"],
        initiation_method=fields.get("01"),
        gui=account.get("00"),
        pix_key=account.get("01"),
        merchant_category_code=fields.get("52"),
        currency=fields.get("53"),
        amount=fields.get("54"),
        country_code=fields.get("58"),
        merchant_name=fields.get("59"),
        merchant_city=fields.get("60"),
        tx_id=additional.get("05"),
        crc=fields["63"],
        crc_valid=crc16(payload[:-4]) == fields["63"].upper(),
    )
