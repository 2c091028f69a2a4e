# Pausal invoicing backend entrypoint.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import customers
from backend.app.api import exchange_rates
from backend.app.api import invoices
from backend.app.api import login
from backend.app.api import reports
from backend.app.api import settings as settings_routes
from backend.app.core.logging import configure_logging
from backend.app.core.rates_warmup import warm_exchange_rates
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(login.router)
app.include_router(customers.router)
app.include_router(invoices.router)
app.include_router(settings_routes.router)
app.include_router(exchange_rates.router)
app.include_router(reports.router)


@app.get("/")
def read_root():
    return {"app": "Pausal invoicing backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def initialize_database_and_rates():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        warm_exchange_rates(db)
    finally:
        db.close()
