import os

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.services.nbs_rates import NBSRateFetcher
from backend.app.services.rate_store import ExchangeRateStore

logger = get_logger("rates_warmup")


def warm_exchange_rates(db: Session) -> None:
    """
    Make sure the rate cache holds at least one day of rates at startup.
    Skips execution when running under pytest so tests never reach NBS.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    logger.info("Initializing exchange rates")
    try:
        rates = NBSRateFetcher(ExchangeRateStore(db)).get_latest_rates()
    except SQLAlchemyError:
        logger.exception("Failed to initialize exchange rates")
        return
    logger.info("Exchange rates initialized (%d currencies)", len(rates))
