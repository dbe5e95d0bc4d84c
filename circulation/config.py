# circulation/config.py
import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class CirculationPolicy:
    """Library policy constants used by the ledgers"""
    loan_period_days: int = 14
    reservation_days: int = 7
    max_pending_reservations: int = 3
    fine_per_day: Decimal = Decimal("0.50")


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///circulation.db")

    # Policy
    loan_period_days: int = int(os.getenv("LOAN_PERIOD_DAYS", "14"))
    reservation_days: int = int(os.getenv("RESERVATION_DAYS", "7"))
    max_pending_reservations: int = int(os.getenv("MAX_PENDING_RESERVATIONS", "3"))
    fine_per_day: Decimal = Decimal(os.getenv("FINE_PER_DAY", "0.50"))

    # Inventory coordinator
    inventory_max_retries: int = int(os.getenv("INVENTORY_MAX_RETRIES", "3"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    cors_origins: List[str] = field(
        default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "http://localhost:3000"))
    )

    @property
    def policy(self) -> CirculationPolicy:
        return CirculationPolicy(
            loan_period_days=self.loan_period_days,
            reservation_days=self.reservation_days,
            max_pending_reservations=self.max_pending_reservations,
            fine_per_day=self.fine_per_day,
        )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API and CLI entry points"""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
