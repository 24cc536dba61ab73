from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from kanha.db.base import Base


class Invoice(Base):
    """A GST sales invoice. Created once with its cart, never updated."""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(String(25), unique=True, nullable=False, index=True)  # MPK/25-26/00001
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    party_name = Column(String(100), nullable=False)
    order_no = Column(String(25), unique=True, nullable=True)
    doctor_name = Column(String(100), nullable=True)
    patient_name = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    pincode = Column(String(10), nullable=True)
    mobile_no = Column(String(10), nullable=True)
    gstin = Column(String(15), nullable=True)
    road_permit = Column(String(25), nullable=True)
    payment_mode = Column(String(25), nullable=False, default="Cash")
    # Percentages applied to the cart subtotal
    adjustment_percent = Column(Numeric(5, 2), nullable=False, default=0)
    cgst = Column(Numeric(5, 2), nullable=False, default=0)
    sgst = Column(Numeric(5, 2), nullable=False, default=0)
    igst = Column(Numeric(5, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", backref="invoices")
    cart = relationship(
        "Cart",
        back_populates="invoice",
        uselist=False,
        cascade="all, delete-orphan",
    )
