"""Fetch today's NBS rates once.

Meant to be triggered by an external scheduler on business days, e.g.::

    0 9 * * 1-5  python -m backend.app.jobs.update_rates

NBS publishes the daily list at around 08:00 Europe/Belgrade.
"""

import sys

from backend.app.core.logging import configure_logging, get_logger
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.services.nbs_rates import NBSRateFetcher
from backend.app.services.rate_store import ExchangeRateStore

logger = get_logger("jobs.update_rates")


def run(db=None) -> int:
    owns_session = db is None
    db = db or SessionLocal()
    try:
        rates = NBSRateFetcher(ExchangeRateStore(db)).update_daily_rates()
    finally:
        if owns_session:
            db.close()
    logger.info("Scheduled exchange rate update completed: %d rates", len(rates))
    return len(rates)


def main() -> int:
    configure_logging(get_settings().log_level)
    Base.metadata.create_all(bind=engine)
    try:
        run()
    except Exception:
        logger.exception("Scheduled exchange rate update failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
