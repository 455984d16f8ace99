"""Invoicing - invoice numbering and totals.

Invariants:
    - Numbers are FTR- followed by a zero-padded 5 digit sequence
    - next_invoice_number is strictly greater than the highest existing number
    - Unparseable numbers are ignored when computing the next one
"""

from typing import Iterable

INVOICE_PREFIX = "FTR-"
INVOICE_DIGITS = 5


def parse_invoice_number(number: str | None) -> int | None:
    if not number or not number.startswith(INVOICE_PREFIX):
        return None
    tail = number[len(INVOICE_PREFIX):]
    if not tail.isdigit():
        return None
    return int(tail)


def format_invoice_number(sequence: int) -> str:
    return f"{INVOICE_PREFIX}{sequence:0{INVOICE_DIGITS}d}"


def next_invoice_number(existing: Iterable[str | None]) -> str:
    """FTR-00001 for the first invoice, otherwise highest + 1."""
    highest = 0
    for number in existing:
        seq = parse_invoice_number(number)
        if seq is not None and seq > highest:
            highest = seq
    return format_invoice_number(highest + 1)


def line_total(quantity: float, unit_price: float) -> float:
    return quantity * unit_price


def invoice_total(items: Iterable) -> float:
    return sum(line_total(i.quantity, i.unit_price) for i in items)
