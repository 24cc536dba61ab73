"""Invoice creation, numbering, lookup and deletion.

Creating an invoice writes the invoice, its cart, its lines and the stock
decrements in one transaction: either all of it commits or none of it does.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from kanha.core.config import settings
from kanha.core.exceptions import BusinessError, format_validation_error
from kanha.models.cart import Cart, CartItem
from kanha.models.invoice import Invoice
from kanha.models.item import Item
from kanha.schemas.common import present_fields
from kanha.schemas.invoice import InvoiceCreate
from kanha.services import inventory_service
from kanha.services.numbering import next_invoice_number
from kanha.services.pricing import CartSummary, differs, line_total, money, summarize_cart, to_decimal

logger = logging.getLogger(__name__)


def get_next_invoice_number(
    db: Session,
    prefix: Optional[str] = None,
    fiscal_year: Optional[str] = None,
) -> str:
    """
    Next number in the current series.

    Not a reservation: two callers may receive the same number, and the
    second to submit gets a 409 from the unique constraint.
    """
    prefix = prefix or settings.INVOICE_PREFIX
    fiscal_year = fiscal_year or settings.INVOICE_FISCAL_YEAR
    series = f"{prefix}/{fiscal_year}/"
    last = (
        db.query(Invoice.invoice_no)
        .filter(Invoice.invoice_no.startswith(series, autoescape=True))
        .order_by(Invoice.invoice_no.desc())
        .limit(1)
        .scalar()
    )
    return next_invoice_number(last, prefix=prefix, fiscal_year=fiscal_year)


PERCENT_FIELDS = ("adjustment_percent", "cgst", "sgst", "igst")
CART_FIGURES = ("cart_total", "net_amount", "net_payable_amount")

# (index, selling_price, selected_quantity, total)
Line = Tuple[int, Decimal, int, Decimal]


def _figure_problems(
    lines: List[Line],
    figures: Dict[str, Optional[Decimal]],
    percentages: Optional[Dict[str, Any]],
    lines_complete: bool = True,
) -> Tuple[CartSummary, List[str]]:
    """
    Recompute line and cart figures and report every submitted value that disagrees.

    Cart totals are only compared when every line could be read, and the
    net figures only when the invoice percentages could be read too.
    """
    problems: List[str] = []
    for index, price, quantity, total in lines:
        expected = line_total(price, quantity)
        if differs(total, expected):
            problems.append(
                f"cart.items.{index}.total: expected {expected} "
                f"({money(price)} x {quantity}), got {total}"
            )

    summary = summarize_cart((total for _, _, _, total in lines), **(percentages or {}))
    if lines_complete:
        checked = CART_FIGURES if percentages is not None else ("cart_total",)
        for field in checked:
            submitted = figures.get(field)
            computed = getattr(summary, field)
            if differs(submitted, computed):
                problems.append(f"cart.{field}: expected {computed}, got {submitted}")
    return summary, problems


def _loose_decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = to_decimal(value)
    except (ArithmeticError, ValueError, TypeError):
        return None
    return number if number.is_finite() else None


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _raw_figure_problems(body: Any, invalid: set) -> List[str]:
    """Arithmetic checks on a body that failed schema validation, over whatever parts are readable."""
    header = _as_dict(_as_dict(body).get("invoice"))
    cart = _as_dict(_as_dict(body).get("cart"))
    items = cart.get("items")
    if not isinstance(items, list):
        return []

    lines: List[Line] = []
    lines_complete = True
    for index, raw in enumerate(items):
        raw = _as_dict(raw)
        price = _loose_decimal(raw.get("selling_price"))
        quantity = raw.get("selected_quantity")
        total = _loose_decimal(raw.get("total"))
        readable = (
            ("cart", "items", index) not in invalid
            and price is not None
            and total is not None
            and isinstance(quantity, int)
            and not isinstance(quantity, bool)
        )
        if readable:
            lines.append((index, price, quantity, total))
        else:
            lines_complete = False

    percentages: Optional[Dict[str, Any]] = {}
    for field in PERCENT_FIELDS:
        value = header.get(field)
        if value is None:
            continue
        number = _loose_decimal(value)
        if number is None or ("invoice", field) in invalid:
            percentages = None
            break
        percentages[field] = number

    figures = {field: _loose_decimal(cart.get(field)) for field in CART_FIGURES}
    _, problems = _figure_problems(lines, figures, percentages, lines_complete)
    return problems


def parse_submission(body: Any) -> InvoiceCreate:
    """
    Validate a raw invoice submission, reporting every problem at once.

    A schema error elsewhere in the body does not hide arithmetic errors:
    when validation fails, the figures that can still be read are checked
    as well and all problems go out in a single 400.
    """
    try:
        return InvoiceCreate.model_validate(body)
    except ValidationError as exc:
        errors = exc.errors()

    problems = [format_validation_error(err) for err in errors]
    # Locations with a schema error, and every prefix of them
    invalid = {tuple(err["loc"][:depth]) for err in errors for depth in range(1, len(err["loc"]) + 1)}
    problems.extend(_raw_figure_problems(body, invalid))
    raise BusinessError.validation(problems)


def _check_cart(data: InvoiceCreate, owned: dict) -> Tuple[CartSummary, List[str], List[str]]:
    """
    Recompute every figure and collect all problems with the submission.

    Returns the server-side summary, validation problems and missing item
    references. Nothing short-circuits: the caller sees every problem at once.
    """
    missing = [
        f"cart.items.{index}.item_id: item {line.item_id} does not exist"
        for index, line in enumerate(data.cart.items)
        if line.item_id not in owned
    ]
    lines = [
        (index, line.selling_price, line.selected_quantity, line.total)
        for index, line in enumerate(data.cart.items)
    ]
    header = data.invoice
    percentages = {field: getattr(header, field) for field in PERCENT_FIELDS}
    figures = {field: getattr(data.cart, field) for field in CART_FIGURES}
    summary, problems = _figure_problems(lines, figures, percentages)
    return summary, problems, missing


def create_invoice(db: Session, user_id: int, data: InvoiceCreate) -> Tuple[Invoice, Cart]:
    """
    Persist invoice + cart + lines and decrement stock atomically.

    Raises:
        ApiError 400: validation problems (all of them) or unknown item ids
        ApiError 409: insufficient stock in strict mode
        IntegrityError: duplicate invoice/order number (mapped to 409 by the API)
    """
    header = data.invoice
    if header.user_id is not None and header.user_id != user_id:
        raise BusinessError.forbidden(f"invoice.user_id={header.user_id} principal={user_id}")

    owned = inventory_service.find_owned_items(db, user_id, [line.item_id for line in data.cart.items])
    summary, problems, missing = _check_cart(data, owned)
    if problems:
        raise BusinessError.validation(problems + missing)
    if missing:
        raise BusinessError.missing_reference(missing)

    mode = settings.STOCK_DECREMENT_MODE
    try:
        values = present_fields(header)
        values.pop("user_id", None)
        invoice = Invoice(user_id=user_id, **values)
        db.add(invoice)
        db.flush()

        cart = Cart(
            invoice_id=invoice.id,
            cart_total=summary.cart_total,
            net_amount=summary.net_amount,
            net_payable_amount=summary.net_payable_amount,
        )
        db.add(cart)
        db.flush()

        for line in data.cart.items:
            line_values = present_fields(line)
            db.add(CartItem(cart_id=cart.id, **line_values))
            if not inventory_service.decrement_stock(db, line.item_id, line.selected_quantity, mode=mode):
                # Earlier lines in this transaction may already have taken stock
                available = inventory_service.current_quantity(db, line.item_id)
                raise BusinessError.conflict(
                    f"Insufficient stock for {owned[line.item_id].cat_no}: "
                    f"requested {line.selected_quantity}, available {available}"
                )
        db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(
        f"Invoice {invoice.invoice_no} created: {len(data.cart.items)} lines, "
        f"net payable {summary.net_payable_amount}"
    )
    return invoice, cart


def get_invoice(db: Session, user_id: int, invoice_id: int) -> Invoice:
    invoice = (
        db.query(Invoice)
        .filter(Invoice.id == invoice_id, Invoice.user_id == user_id)
        .first()
    )
    if not invoice:
        raise BusinessError.not_found("Invoice", reason=f"id={invoice_id} user={user_id}")
    return invoice


def get_invoice_detail(db: Session, user_id: int, invoice_id: int) -> dict:
    """Invoice, its cart, and its lines joined with the current item details."""
    invoice = get_invoice(db, user_id, invoice_id)
    cart = invoice.cart
    if cart is None:
        raise BusinessError.not_found("Cart", reason=f"invoice={invoice_id}")

    rows = (
        db.query(CartItem, Item)
        .outerjoin(Item, CartItem.item_id == Item.id)
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
        .all()
    )
    lines = [
        {
            "id": line.id,
            "cart_id": line.cart_id,
            "item_id": line.item_id,
            "hsn_code": line.hsn_code,
            "addon_percent": line.addon_percent,
            "selected_quantity": line.selected_quantity,
            "selling_price": line.selling_price,
            "total": line.total,
            "product_name": item.product_name if item else None,
            "lot_no": item.lot_no if item else None,
            "cat_no": item.cat_no if item else None,
            "mrp": item.mrp if item else None,
            "hsn_no": item.hsn_no if item else None,
        }
        for line, item in rows
    ]
    return {
        "invoice": invoice,
        "cart": {
            "id": cart.id,
            "invoice_id": cart.invoice_id,
            "cart_total": cart.cart_total,
            "net_amount": cart.net_amount,
            "net_payable_amount": cart.net_payable_amount,
            "items": lines,
        },
    }


def list_user_invoices(db: Session, user_id: int) -> List[dict]:
    rows = (
        db.query(
            Invoice.id,
            Invoice.invoice_no,
            Invoice.party_name,
            Invoice.created_at,
            Invoice.payment_mode,
            Cart.net_payable_amount,
        )
        .outerjoin(Cart, Cart.invoice_id == Invoice.id)
        .filter(Invoice.user_id == user_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )
    return [
        {
            "id": row.id,
            "invoice_no": row.invoice_no,
            "party_name": row.party_name,
            "created_at": row.created_at,
            "payment_mode": row.payment_mode,
            "net_payable": row.net_payable_amount,
        }
        for row in rows
    ]


def delete_invoice(db: Session, user_id: int, invoice_id: int) -> str:
    """
    Delete an invoice with its cart and lines.

    Stock sold on the invoice is not returned to inventory.
    """
    invoice = get_invoice(db, user_id, invoice_id)
    invoice_no = invoice.invoice_no
    db.delete(invoice)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Invoice {invoice_no} deleted (stock not restored)")
    return invoice_no
