"""
Tests for the amount-injection codec.

Coverage matrix:

  Typical checkout        deployed template, 150000   → exact anchor string
  Zero amount             "54010" inserted            → exact anchor string
  Missing country code    amount appended             → no exception
  Existing amount         tag 54 replaced             → single tag 54
  Shadowed "5802"         MCC value "5802"            → inserted before tag 58
  Malformed template      not TLV                     → literal insertion
  Invalid amounts         negative / float / bool     → InvalidAmountError
"""

import pytest

from qris.app.codec.amount import (
    InvalidAmountError,
    build_amount_field,
    canonical_amount,
    generate_payment_code,
    inject_amount,
    strip_checksum,
)
from qris.app.codec.crc import crc16_ccitt_false
from qris.app.codec.tlv import parse_tlv
from qris.tests.fixtures.templates import (
    BASE_TEMPLATE,
    BASE_WITH_0,
    BASE_WITH_150000,
    MALFORMED_TEMPLATE,
    MALFORMED_WITH_7,
    NO_COUNTRY_TEMPLATE,
    NO_COUNTRY_WITH_150000,
    SHADOWED_TEMPLATE,
    SHADOWED_WITH_25000,
    TEMPLATE_WITH_AMOUNT,
)


# ---------------------------------------------------------------------------
# Amount field encoding
# ---------------------------------------------------------------------------

def test_amount_field_boundaries():
    assert build_amount_field(0) == "5401" + "0"
    assert build_amount_field(150000) == "5406" + "150000"


def test_amount_field_accepts_ninety_nine_digits():
    amount = 10 ** 99 - 1

    assert build_amount_field(amount) == "5499" + "9" * 99


@pytest.mark.parametrize(
    "amount",
    [-1, 10 ** 99, 1.5, 150000.0, "150000", True, None],
)
def test_rejects_amounts_outside_encodable_domain(amount):
    with pytest.raises(InvalidAmountError):
        canonical_amount(amount)


def test_invalid_amount_is_a_value_error():
    with pytest.raises(ValueError):
        inject_amount(BASE_TEMPLATE, -5)


# ---------------------------------------------------------------------------
# Typical checkout
# ---------------------------------------------------------------------------

def test_typical_checkout_produces_anchor_payload():
    assert inject_amount(BASE_TEMPLATE, 150000) == BASE_WITH_150000


def test_typical_checkout_checksum_and_length():
    result = inject_amount(BASE_TEMPLATE, 150000)
    amount_field = build_amount_field(150000)

    assert result[-4:] == crc16_ccitt_false(result[:-4])
    assert result[:-4].endswith("6304")
    assert len(result) == len(BASE_TEMPLATE) - 4 + len(amount_field) + 4


def test_zero_amount_produces_anchor_payload():
    assert inject_amount(BASE_TEMPLATE, 0) == BASE_WITH_0


@pytest.mark.parametrize("amount", [0, 1, 9, 10, 1500, 150000, 10 ** 12])
def test_amount_field_immediately_precedes_country_code(amount):
    result = inject_amount(BASE_TEMPLATE, amount)
    amount_str = str(amount)
    expected_field = f"54{len(amount_str):02d}{amount_str}"

    index = result.index("5802")

    assert result[index - len(expected_field):index] == expected_field


def test_other_fields_are_preserved_in_order():
    before = [(f.tag, f.value) for f in parse_tlv(BASE_TEMPLATE)]
    after = [(f.tag, f.value) for f in parse_tlv(inject_amount(BASE_TEMPLATE, 42))]

    assert [x for x in after if x[0] not in {"54", "63"}] == [
        x for x in before if x[0] != "63"
    ]
    assert ("54", "42") in after
    assert after[-1][0] == "63"


def test_single_checksum_field_in_output():
    result = inject_amount(BASE_TEMPLATE, 150000)

    assert [f.tag for f in parse_tlv(result)].count("63") == 1


def test_injection_is_deterministic():
    assert inject_amount(BASE_TEMPLATE, 777) == inject_amount(BASE_TEMPLATE, 777)


def test_template_is_not_mutated():
    template = str(BASE_TEMPLATE)

    inject_amount(template, 150000)

    assert template == BASE_TEMPLATE


# ---------------------------------------------------------------------------
# Insertion point edge cases
# ---------------------------------------------------------------------------

def test_missing_country_code_appends_amount():
    assert inject_amount(NO_COUNTRY_TEMPLATE, 150000) == NO_COUNTRY_WITH_150000


def test_existing_amount_is_replaced():
    result = inject_amount(TEMPLATE_WITH_AMOUNT, 150000)

    assert result == BASE_WITH_150000
    assert [f.tag for f in parse_tlv(result)].count("54") == 1


def test_country_code_prefix_inside_other_value_is_ignored():
    assert inject_amount(SHADOWED_TEMPLATE, 25000) == SHADOWED_WITH_25000


def test_malformed_template_uses_literal_insertion(caplog):
    with caplog.at_level("WARNING", logger="qris.app.codec.amount"):
        result = inject_amount(MALFORMED_TEMPLATE, 7)

    assert result == MALFORMED_WITH_7
    assert "literal insertion" in caplog.text


@pytest.mark.parametrize("template", ["", "ABC", "6304", "garbage-without-tags"])
def test_never_raises_on_template_content(template):
    result = inject_amount(template, 10)

    assert result[-4:] == crc16_ccitt_false(result[:-4])


# ---------------------------------------------------------------------------
# Checksum stripping
# ---------------------------------------------------------------------------

def test_strip_checksum_removes_whole_checksum_field():
    assert strip_checksum(BASE_TEMPLATE) == BASE_TEMPLATE[:-8]


def test_strip_checksum_drops_last_four_without_checksum_tag():
    assert strip_checksum("0002015802IDABCD") == "0002015802ID"


# ---------------------------------------------------------------------------
# PaymentCode
# ---------------------------------------------------------------------------

def test_generate_payment_code_carries_checksum():
    code = generate_payment_code(BASE_TEMPLATE, 150000)

    assert code.payload == BASE_WITH_150000
    assert code.amount == 150000
    assert code.checksum == "661E"
