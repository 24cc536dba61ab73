"""Invoice numbers for when the server cannot be reached."""
import logging

from kanha.services.numbering import (
    DEFAULT_FISCAL_YEAR,
    DEFAULT_PREFIX,
    fiscal_year_of,
    format_invoice_number,
    next_invoice_number,
    parse_sequence,
)

logger = logging.getLogger(__name__)

LAST_INVOICE_KEY = "lastInvoiceNumber"


class FallbackInvoiceNumberGenerator:
    """
    Continues the series from the last number this client saw.

    The result is optimistic: it can collide with a number the server hands
    out meanwhile, which then shows up as a 409 on submission.
    """

    def __init__(self, store, prefix: str = DEFAULT_PREFIX, fiscal_year: str = DEFAULT_FISCAL_YEAR):
        self.store = store
        self.prefix = prefix
        self.fiscal_year = fiscal_year

    def remember(self, invoice_no: str) -> None:
        self.store.set(LAST_INVOICE_KEY, invoice_no)

    def last(self):
        return self.store.get(LAST_INVOICE_KEY)

    def next(self) -> str:
        last = self.last()
        if last and parse_sequence(last) is not None:
            fiscal_year = fiscal_year_of(last) or self.fiscal_year
            number = next_invoice_number(last, prefix=self.prefix, fiscal_year=fiscal_year)
        else:
            number = format_invoice_number(self.prefix, self.fiscal_year, 1)
        logger.warning(f"Server unavailable, using fallback invoice number {number}")
        self.remember(number)
        return number
