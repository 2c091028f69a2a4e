from sqlalchemy import Boolean, Column, DateTime, Integer, String

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, index=True)
    account_name = Column(String, nullable=False)
    iban = Column(String, nullable=False)
    swift = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
