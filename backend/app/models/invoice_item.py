"""Invoice line item model."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.services.billing import calculate_line_total

DEFAULT_UNIT = "kom"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String, nullable=False)
    unit = Column(String, nullable=False, default=DEFAULT_UNIT)
    quantity = Column(Numeric(10, 2), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")

    @property
    def total(self):
        return calculate_line_total(self.quantity, self.price, self.discount)
