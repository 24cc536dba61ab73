"""Stock items: lookups, prefix search, paging and CRUD. Every query is scoped to one shop."""
import logging
import math
from typing import List, Tuple

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kanha.core.exceptions import BusinessError
from kanha.models.item import Item
from kanha.schemas.common import present_fields
from kanha.schemas.item import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = {
    "cat_no": Item.cat_no,
    "product_name": Item.product_name,
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_item(db: Session, user_id: int, item_id: int) -> Item:
    item = db.query(Item).filter(Item.id == item_id, Item.user_id == user_id).first()
    if not item:
        raise BusinessError.not_found("Item", reason=f"id={item_id} user={user_id}")
    return item


def get_item_by_cat_no(db: Session, user_id: int, cat_no: str) -> Item:
    """
    Exact catalog-number lookup.

    A 404 here tells stock entry the item is new; invoice entry uses the
    result to pre-fill name, MRP, selling price and available quantity.
    """
    item = (
        db.query(Item)
        .filter(Item.cat_no == cat_no.strip(), Item.user_id == user_id)
        .first()
    )
    if not item:
        raise BusinessError.not_found("Item", reason=f"cat_no={cat_no} user={user_id}")
    return item


def search_items(db: Session, user_id: int, search_type: str, term: str) -> Tuple[int, List[Item]]:
    """Case-insensitive starts-with match on cat_no or product_name."""
    column = SEARCH_COLUMNS.get(search_type)
    if column is None:
        raise BusinessError.validation(
            [f"searchType: must be one of {', '.join(SEARCH_COLUMNS)}"]
        )
    term = (term or "").strip()
    if not term:
        raise BusinessError.validation(["searchTerm: cannot be empty"])

    items = (
        db.query(Item)
        .filter(Item.user_id == user_id, column.ilike(f"{_escape_like(term)}%", escape="\\"))
        .order_by(column, Item.id)
        .all()
    )
    return len(items), items


def list_items_page(db: Session, user_id: int, page: int, page_size: int) -> dict:
    q = db.query(Item).filter(Item.user_id == user_id)
    total_items = q.count()
    total_pages = math.ceil(total_items / page_size) if total_items else 0
    items = (
        q.order_by(Item.created_at.desc(), Item.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "items": items,
        "page": page,
        "page_size": page_size,
        "total_items": total_items,
        "total_pages": total_pages,
    }


def create_item(db: Session, user_id: int, data: ItemCreate) -> Item:
    if db.query(Item.id).filter(Item.cat_no == data.cat_no).first():
        raise BusinessError.conflict("A product with this catalog number already exists.")

    values = present_fields(data)
    values.pop("user_id", None)
    item = Item(user_id=user_id, **values)
    db.add(item)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(item)
    logger.info(f"Item created: {item.cat_no} ({item.product_name}) qty={item.quantity}")
    return item


def update_item(db: Session, user_id: int, item_id: int, updates: ItemUpdate) -> Item:
    """Apply only the fields present in ``updates``."""
    item = get_item(db, user_id, item_id)
    changes = present_fields(updates, drop_blank=False)

    new_cat_no = changes.get("cat_no")
    if new_cat_no is not None and new_cat_no != item.cat_no:
        taken = (
            db.query(Item.id)
            .filter(Item.user_id == user_id, Item.cat_no == new_cat_no, Item.id != item.id)
            .first()
        )
        if taken:
            raise BusinessError.validation(
                ["cat_no: A product with this catalog number already exists."]
            )

    for field, value in changes.items():
        setattr(item, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(item)
    return item


def delete_item(db: Session, user_id: int, item_id: int) -> dict:
    """Hard delete. Returns what was removed."""
    item = get_item(db, user_id, item_id)
    removed = {"id": item.id, "cat_no": item.cat_no, "product_name": item.product_name}
    db.delete(item)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BusinessError.conflict(
            "Item is referenced by existing invoices and cannot be deleted."
        )
    return removed


def decrement_stock(db: Session, item_id: int, quantity: int, mode: str = "strict") -> bool:
    """
    Take ``quantity`` units off an item in one UPDATE statement.

    strict: only decrements when enough stock is on hand; returns False otherwise.
    clamp: decrements, flooring the result at zero; always returns True when the item exists.

    Neither mode reads the quantity first, so two concurrent invoices cannot
    both act on the same stale value.
    """
    stmt = update(Item).where(Item.id == item_id)
    if mode == "clamp":
        stmt = stmt.values(
            quantity=case(
                (Item.quantity >= quantity, Item.quantity - quantity),
                else_=0,
            )
        )
    else:
        stmt = stmt.where(Item.quantity >= quantity).values(quantity=Item.quantity - quantity)

    result = db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount == 1


def find_owned_items(db: Session, user_id: int, item_ids: List[int]) -> dict:
    """Map of id -> Item for the given ids that belong to ``user_id``."""
    if not item_ids:
        return {}
    rows = db.query(Item).filter(Item.user_id == user_id, Item.id.in_(set(item_ids))).all()
    return {row.id: row for row in rows}


def current_quantity(db: Session, item_id: int) -> int:
    """Quantity as the current transaction sees it, after any decrements it made."""
    return db.query(Item.quantity).filter(Item.id == item_id).scalar()
