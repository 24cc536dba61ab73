from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from kanha.db.base import Base


class Item(Base):
    """
    A stock-keeping unit.

    cat_no is the lookup key used during stock entry and invoice line entry.
    quantity is decremented by invoice lines and never goes below zero.
    """
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cat_no = Column(String(25), unique=True, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    lot_no = Column(String(25), nullable=True)
    hsn_no = Column(String(25), nullable=True)  # HSN tax classification
    quantity = Column(Integer, nullable=False, default=0)
    w_rate = Column(Numeric(10, 2), nullable=True)  # wholesale rate
    selling_price = Column(Numeric(10, 2), nullable=True)
    mrp = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="items")
