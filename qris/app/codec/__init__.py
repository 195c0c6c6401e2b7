from .crc import crc16_ccitt_false, crc16_ccitt_false_int
from .tlv import TLVDecodeError, TLVField, parse_nested, parse_tlv, serialize_tlv
from .amount import (
    InvalidAmountError,
    PaymentCode,
    build_amount_field,
    generate_payment_code,
    inject_amount,
)

__all__ = [
    "crc16_ccitt_false",
    "crc16_ccitt_false_int",
    "TLVDecodeError",
    "TLVField",
    "parse_nested",
    "parse_tlv",
    "serialize_tlv",
    "InvalidAmountError",
    "PaymentCode",
    "build_amount_field",
    "generate_payment_code",
    "inject_amount",
]
