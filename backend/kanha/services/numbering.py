"""Invoice number format: <PREFIX>/<FISCAL-YEAR>/<5-digit sequence>, e.g. MPK/25-26/00001."""
import re
from typing import Optional

SEQUENCE_WIDTH = 5
DEFAULT_PREFIX = "MPK"
DEFAULT_FISCAL_YEAR = "25-26"

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def format_invoice_number(prefix: str, fiscal_year: str, sequence: int) -> str:
    return f"{prefix}/{fiscal_year}/{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(invoice_no: str) -> Optional[int]:
    """Trailing numeric suffix of an invoice number, or None if there is none."""
    if not invoice_no:
        return None
    match = _TRAILING_DIGITS.search(invoice_no.strip())
    if not match:
        return None
    return int(match.group(1))


def fiscal_year_of(invoice_no: str) -> Optional[str]:
    """Middle segment of MPK/25-26/00007, or None for other shapes."""
    parts = invoice_no.split("/")
    if len(parts) != 3 or not parts[1]:
        return None
    return parts[1]


def next_invoice_number(
    last_invoice_no: Optional[str],
    prefix: str = DEFAULT_PREFIX,
    fiscal_year: str = DEFAULT_FISCAL_YEAR,
) -> str:
    """
    Number following ``last_invoice_no``.

    >>> next_invoice_number("MPK/25-26/00007")
    'MPK/25-26/00008'
    >>> next_invoice_number(None)
    'MPK/25-26/00001'
    """
    sequence = parse_sequence(last_invoice_no) if last_invoice_no else None
    if sequence is None:
        return format_invoice_number(prefix, fiscal_year, 1)
    return format_invoice_number(prefix, fiscal_year, sequence + 1)
