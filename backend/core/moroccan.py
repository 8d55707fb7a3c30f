"""
Moroccan business rules: VAT (TVA), corporate tax (IS), company
identifier validation and dirham formatting.

All money arithmetic uses Decimal rounded half-up to the cent.
"""
import re
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from rest_framework import serializers

VAT_RATE = Decimal('0.20')
CENT = Decimal('0.01')

# IS brackets
IS_FIRST_BRACKET_LIMIT = Decimal('300000')
IS_SECOND_BRACKET_LIMIT = Decimal('1000000')
IS_FIRST_RATE = Decimal('0.10')
IS_SECOND_RATE = Decimal('0.20')
IS_TOP_RATE = Decimal('0.31')

ICE_RE = re.compile(r'^\d{15}$')
IF_RE = re.compile(r'^\d{8}$')
TP_RE = re.compile(r'^\d+$')
CNSS_RE = re.compile(r'^\d{7,10}$')


def to_decimal(value):
    """Convert numbers, strings and None to Decimal (None -> 0)"""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def default_vat_rate():
    """Default VAT rate as a percentage (20)"""
    return Decimal(getattr(settings, 'DEFAULT_VAT_RATE', 20))


def calculate_vat(amount, rate=VAT_RATE):
    return round2(to_decimal(amount) * rate)


def calculate_total_with_vat(amount, rate=VAT_RATE):
    return round2(to_decimal(amount) * (1 + rate))


def calculate_amount_without_vat(total_with_vat, rate=VAT_RATE):
    return round2(to_decimal(total_with_vat) / (1 + rate))


def calculate_line_total(quantity, unit_price):
    return round2(to_decimal(quantity) * to_decimal(unit_price))


def calculate_invoice_totals(items, vat_rate=None):
    """
    Compute (subtotal, vat, total) for a list of line items.

    Each item is a dict with ``quantity`` and ``unit_price`` (or an object with
    those attributes). Line totals are rounded before summing and VAT is
    computed on the rounded subtotal. ``vat_rate`` is a percentage, 20 by
    default; pass 0 for documents without VAT.
    """
    if vat_rate is None:
        vat_rate = default_vat_rate()
    rate = to_decimal(vat_rate) / Decimal('100')

    subtotal = Decimal('0')
    for item in items:
        if isinstance(item, dict):
            quantity = item.get('quantity')
            unit_price = item.get('unit_price')
        else:
            quantity = item.quantity
            unit_price = item.unit_price
        subtotal += calculate_line_total(quantity, unit_price)

    subtotal = round2(subtotal)
    vat = calculate_vat(subtotal, rate)
    total = round2(subtotal + vat)
    return subtotal, vat, total


def calculate_corporate_tax(profit):
    """Impôt sur les Sociétés for a yearly net profit (no tax on losses)"""
    profit = to_decimal(profit)
    if profit <= 0:
        return Decimal('0.00')
    if profit <= IS_FIRST_BRACKET_LIMIT:
        return round2(profit * IS_FIRST_RATE)
    first = IS_FIRST_BRACKET_LIMIT * IS_FIRST_RATE
    if profit <= IS_SECOND_BRACKET_LIMIT:
        return round2(first + (profit - IS_FIRST_BRACKET_LIMIT) * IS_SECOND_RATE)
    second = (IS_SECOND_BRACKET_LIMIT - IS_FIRST_BRACKET_LIMIT) * IS_SECOND_RATE
    return round2(first + second + (profit - IS_SECOND_BRACKET_LIMIT) * IS_TOP_RATE)


# Identifier validation

def validate_ice(value):
    return bool(value) and bool(ICE_RE.match(str(value)))


def validate_if(value):
    return bool(value) and bool(IF_RE.match(str(value)))


def validate_rc(value):
    return value is not None and 0 < len(str(value)) <= 20


def validate_tp(value):
    return bool(value) and bool(TP_RE.match(str(value)))


def validate_cnss(value):
    return bool(value) and bool(CNSS_RE.match(str(value)))


def _field_validator(check, message):
    def validator(value):
        if value in (None, ''):
            return
        if not check(value):
            raise serializers.ValidationError(message)
    return validator


ice_validator = _field_validator(validate_ice, 'ICE must contain exactly 15 digits.')
if_validator = _field_validator(validate_if, 'IF must contain exactly 8 digits.')
rc_validator = _field_validator(validate_rc, 'RC must be between 1 and 20 characters.')
tp_validator = _field_validator(validate_tp, 'TP must contain digits only.')
cnss_validator = _field_validator(validate_cnss, 'CNSS must contain 7 to 10 digits.')


# Formatting

def _group_thousands(value):
    """1234567.8 -> '1.234.567,80' (fr-MA separators)"""
    rounded = round2(value)
    sign = '-' if rounded < 0 else ''
    integer_part, decimal_part = f"{abs(rounded):.2f}".split('.')
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return f"{sign}{'.'.join(groups)},{decimal_part}"


def format_mad_full(amount):
    return f"{_group_thousands(to_decimal(amount))} DH"


def format_mad(amount):
    """Compact dirham amount: 1.25M DH, 4.50k DH, or the full form below 1000"""
    amount = to_decimal(amount)
    if abs(amount) >= 1000000:
        return f"{round2(amount / Decimal('1000000')):.2f}M DH"
    if abs(amount) >= 1000:
        return f"{round2(amount / Decimal('1000')):.2f}k DH"
    return format_mad_full(amount)
