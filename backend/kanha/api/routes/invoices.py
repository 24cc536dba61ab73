"""Invoices: numbering, atomic creation against stock, lookup, printing and deletion."""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from kanha.api.deps import get_db, get_current_principal, ensure_same_user
from kanha.core.audit import AuditLog
from kanha.core.security import AuthenticatedPrincipal
from kanha.schemas.invoice import (
    InvoiceCreated,
    InvoiceDetail,
    InvoiceSummary,
    NextInvoiceNumber,
)
from kanha.schemas.item import ItemResponse
from kanha.services import inventory_service, invoice_service
from kanha.services.pdf_service import render_invoice_pdf

router = APIRouter()


@router.get("/next-invoice-number", response_model=NextInvoiceNumber)
def next_invoice_number(
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Pre-fill value for a new invoice form. Not reserved."""
    return {"invoice_no": invoice_service.get_next_invoice_number(db)}


@router.get("/items/cat-no/{cat_no}", response_model=ItemResponse)
def get_item_for_invoice_line(
    cat_no: str,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Product details and available quantity for an invoice line."""
    return inventory_service.get_item_by_cat_no(db, principal.user_id, cat_no)


@router.get("/user/{user_id}", response_model=List[InvoiceSummary])
def list_user_invoices(
    user_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    ensure_same_user(principal, user_id, "invoice")
    return invoice_service.list_user_invoices(db, user_id)


@router.post("", response_model=InvoiceCreated, status_code=status.HTTP_201_CREATED)
def create_invoice(
    body: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """
    Create invoice + cart + cart items and decrement stock in one transaction.

    The body is an InvoiceCreate. It is validated in the service so that
    schema errors and figure mismatches are reported together.
    Any failure rolls everything back; there is no partial success.
    """
    data = invoice_service.parse_submission(body)
    invoice, cart = invoice_service.create_invoice(db, principal.user_id, data)
    AuditLog.log_action(
        "create", "invoice", invoice.id, principal.user_id,
        changes={"invoice_no": invoice.invoice_no, "lines": len(data.cart.items)},
    )
    return {"invoice_id": invoice.id, "cart_id": cart.id, "invoice_no": invoice.invoice_no}


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    return invoice_service.get_invoice_detail(db, principal.user_id, invoice_id)


@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    detail = invoice_service.get_invoice_detail(db, principal.user_id, invoice_id)
    buffer = render_invoice_pdf(detail, principal.shop_name)
    filename = detail["invoice"].invoice_no.replace("/", "-")
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={filename}.pdf"},
    )


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
):
    """Delete an invoice. Stock sold on it is not restored."""
    invoice_no = invoice_service.delete_invoice(db, principal.user_id, invoice_id)
    AuditLog.log_action("delete", "invoice", invoice_id, principal.user_id, changes={"invoice_no": invoice_no})
    return {"message": f"Deleted invoice {invoice_no}", "id": invoice_id}
