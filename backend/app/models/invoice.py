"""Invoice model for billing."""

from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base

INVOICE_STATUSES = ("draft", "sent", "paid", "overdue")


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, nullable=False, unique=True, index=True)
    invoice_date = Column(Date, nullable=False)
    trading_date = Column(Date, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)

    currency = Column(String(3), nullable=False, default="RSD")
    # Snapshot taken at save time; later rate updates never touch it
    exchange_rate = Column(Numeric(10, 4), nullable=False, default=Decimal("1"))
    payment_deadline = Column(Integer, nullable=False, default=30)
    notes = Column(Text, nullable=True)
    total_rsd = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    status = Column(String, nullable=False, default="draft")

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    customer = relationship("Customer", back_populates="invoices")
    bank_account = relationship("BankAccount")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )

    @property
    def customer_name(self):
        return self.customer.name if self.customer else None

    @property
    def customer_company(self):
        return self.customer.company if self.customer else None
