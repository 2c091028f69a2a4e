from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all
from backend.app.models.customer import Customer  # noqa: F401
from backend.app.models.bank_account import BankAccount  # noqa: F401
from backend.app.models.company_settings import CompanySettings  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.invoice_item import InvoiceItem  # noqa: F401
from backend.app.models.exchange_rate import ExchangeRate  # noqa: F401
