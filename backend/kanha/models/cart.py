from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from kanha.db.base import Base


class Cart(Base):
    """Financial summary of one invoice."""
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), unique=True, nullable=False, index=True)
    cart_total = Column(Numeric(10, 2), nullable=False)  # sum of line totals
    net_amount = Column(Numeric(10, 2), nullable=False)  # after adjustment and GST
    net_payable_amount = Column(Numeric(10, 2), nullable=True)  # after round off

    invoice = relationship("Invoice", back_populates="cart")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )


class CartItem(Base):
    """One invoice line."""
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    hsn_code = Column(String(20), nullable=True)  # overrides the item's HSN on print
    addon_percent = Column(Numeric(5, 2), nullable=True)
    selected_quantity = Column(Integer, nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)  # after add-on
    total = Column(Numeric(10, 2), nullable=False)

    cart = relationship("Cart", back_populates="items")
    item = relationship("Item")
