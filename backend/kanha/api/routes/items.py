"""Items: stock entry, lookup, prefix search, paging and deletion."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kanha.api.deps import get_db, get_current_principal, ensure_same_user
from kanha.core.audit import AuditLog
from kanha.core.config import settings
from kanha.core.security import AuthenticatedPrincipal
from kanha.schemas.item import (
    ItemCreate,
    ItemPage,
    ItemResponse,
    ItemSearchResponse,
    ItemUpdate,
    SearchType,
)
from kanha.services import inventory_service

router = APIRouter()


@router.get("/user/{user_id}", response_model=ItemPage)
def list_user_items(
    user_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.ITEMS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """One page of a shop's items, newest first, with total item and page counts."""
    ensure_same_user(principal, user_id, "item")
    return inventory_service.list_items_page(db, user_id, page, page_size)


@router.get("/cat-no/{cat_no}", response_model=ItemResponse)
def get_item_by_cat_no(
    cat_no: str,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    return inventory_service.get_item_by_cat_no(db, principal.user_id, cat_no)


@router.get("/search", response_model=ItemSearchResponse)
def search_items(
    user_id: int = Query(..., alias="userId"),
    search_type: SearchType = Query(..., alias="searchType"),
    search_term: str = Query(..., alias="searchTerm"),
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Items whose cat_no or product_name starts with the term (case-insensitive)."""
    ensure_same_user(principal, user_id, "item")
    count, items = inventory_service.search_items(db, user_id, search_type, search_term)
    return {"count": count, "items": items}


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(
    item_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    return inventory_service.get_item(db, principal.user_id, item_id)


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    data: ItemCreate,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Add a stock item. A duplicate catalog number is a 409."""
    if data.user_id is not None:
        ensure_same_user(principal, data.user_id, "item")
    item = inventory_service.create_item(db, principal.user_id, data)
    AuditLog.log_action("create", "item", item.id, principal.user_id,
                        changes={"cat_no": item.cat_no, "quantity": item.quantity})
    return item


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    updates: ItemUpdate,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Partial update: fields left out of the body keep their stored values."""
    item = inventory_service.update_item(db, principal.user_id, item_id, updates)
    AuditLog.log_action("update", "item", item.id, principal.user_id,
                        changes=updates.model_dump(exclude_unset=True))
    return item


@router.delete("/{item_id}")
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    removed = inventory_service.delete_item(db, principal.user_id, item_id)
    AuditLog.log_action("delete", "item", item_id, principal.user_id, changes={"cat_no": removed["cat_no"]})
    return {"message": f"Deleted {removed['product_name']}", "id": item_id}
