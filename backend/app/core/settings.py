import os

DEFAULT_SUPPORTED_CURRENCIES = ("EUR", "USD", "GBP", "CHF", "JPY", "AUD", "CAD", "SEK", "NOK", "DKK")


def _env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    return value if value is not None and value != "" else default


class Settings:
    def __init__(self):
        self.app_name = "Pausal Invoicing"
        self.api_version = "1.0.0"
        self.environment = _env("ENVIRONMENT", "development")
        self.secret_key = _env("SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        # Tokens live for a week, matching the single-user login flow
        self.access_token_expire_minutes = int(_env("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.app_password = _env("APP_PASSWORD", "admin123")
        self.app_password_hash = _env("APP_PASSWORD_HASH") or None
        self.database_url = _env("DATABASE_URL", "sqlite:///./pausal.db")
        self.cors_origins = [o.strip() for o in _env("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
        self.log_level = _env("LOG_LEVEL", "INFO")

        self.nbs_api_url = _env("NBS_API_URL", "https://api.nbs.rs/exchange-rate/v1/rate/daily/")
        self.nbs_timeout_seconds = float(_env("NBS_TIMEOUT_SECONDS", "10"))
        self.rate_lookback_days = int(_env("RATE_LOOKBACK_DAYS", "10"))
        self.supported_currencies = frozenset(
            c.strip().upper()
            for c in _env("SUPPORTED_CURRENCIES", ",".join(DEFAULT_SUPPORTED_CURRENCIES)).split(",")
            if c.strip()
        )


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
