import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Storage
    data_dir: str = os.getenv("LIBRARY_DATA_DIR", os.path.join(os.getcwd(), "Data"))

    # Loan rules
    loan_days: int = int(os.getenv("LOAN_DAYS", "14"))
    daily_late_fee: Decimal = Decimal(os.getenv("DAILY_LATE_FEE", "1.00"))

    # Manual fine bounds (validation boundary only; automatic fines are unbounded)
    manual_fine_min: Decimal = Decimal(os.getenv("MANUAL_FINE_MIN", "0.01"))
    manual_fine_max: Decimal = Decimal(os.getenv("MANUAL_FINE_MAX", "10000.00"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    log_file: Optional[str] = os.getenv("LOG_FILE")

    # Application
    app_name: str = os.getenv("APP_NAME", "Sistema de Gestión de Biblioteca")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG")

    # Publication year upper bound used by the book form
    max_publication_year: int = int(os.getenv("MAX_PUBLICATION_YEAR", "2026"))


settings = Settings()
