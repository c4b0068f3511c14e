"""Unit tests for BR Code CRC16 and TLV primitives"""

import pytest
from pizzeria_gateway.domain.brcode import crc16, format_field, parse_fields, parse_pix_payload
from pizzeria_gateway.domain.exceptions import InvalidPayloadError

# Example payload from the Banco Central BR Code manual (without its CRC value)
BCB_EXAMPLE = (
    "00020126580014br.gov.bcb.pix0136123e4567-e12b-12d1-a456-426655440000"
    "5204000053039865802BR5913Fulano de Tal6008BRASILIA62070503***6304"
)


def test_crc16_standard_check_value():
    """CRC-16/CCITT-FALSE check value over "123456789" """
    assert crc16("123456789") == "29B1"


def test_crc16_bcb_manual_example():
    assert crc16(BCB_EXAMPLE) == "1D3D"


def test_crc16_empty_input_is_initial_register():
    """No bytes processed: 0xFFFF comes out unchanged"""
    assert crc16("") == "FFFF"


def test_crc16_is_zero_padded_uppercase():
    result = crc16("A")
    assert len(result) == 4
    assert result == result.upper()
    assert all(c in "0123456789ABCDEF" for c in result)


def test_format_field_two_digit_length():
    assert format_field("00", "01") == "000201"
    assert format_field("58", "BR") == "5802BR"
    assert format_field("62", "") == "6200"


def test_format_field_nested_length_measured_on_serialized_inner():
    inner = format_field("00", "BR.GOV.BCB.PIX") + format_field("01", "12345678901")
    assert format_field("26", inner) == "2633" + inner


def test_format_field_max_length():
    value = "X" * 99
    assert format_field("26", value) == "2699" + value

    with pytest.raises(ValueError):
        format_field("26", "X" * 100)


def test_parse_fields_single_level():
    assert parse_fields("000201010212") == {"00": "01", "01": "12"}


def test_parse_fields_truncated_value():
    with pytest.raises(InvalidPayloadError):
        parse_fields("000501")


def test_parse_fields_non_numeric_length():
    with pytest.raises(InvalidPayloadError):
        parse_fields("00A101")


def test_parse_fields_lengths_are_bytes():
    encoded = format_field("01", "joão@pizza") + format_field("02", "ok")

    assert encoded.startswith("0111")
    assert parse_fields(encoded) == {"01": "joão@pizza", "02": "ok"}


def test_parse_fields_split_character():
    with pytest.raises(InvalidPayloadError):
        parse_fields("0101ç")


def test_parse_pix_payload_bcb_example():
    parsed = parse_pix_payload(BCB_EXAMPLE + "1D3D")

    assert parsed.gui == "br.gov.bcb.pix"
    assert parsed.pix_key == "123e4567-e12b-12d1-a456-426655440000"
    assert parsed.merchant_name == "Fulano de Tal"
    assert parsed.merchant_city == "BRASILIA"
    assert parsed.tx_id == "***"
    assert parsed.amount is None
    assert parsed.crc_valid is True


def test_parse_pix_payload_detects_tampering():
    tampered = BCB_EXAMPLE.replace("Fulano de Tal", "Fulano de Mal") + "1D3D"
    assert parse_pix_payload(tampered).crc_valid is False


def test_parse_pix_payload_requires_crc_field():
    with pytest.raises(InvalidPayloadError):
        parse_pix_payload("000201010212")
