# circulation/services/__init__.py
from .catalog import CatalogService
from .events import CopyAvailable, EventBus
from .fines import calculate_fine
from .inventory import InventoryCoordinator, InventoryReport, LockRegistry
from .loans import LoanLedger
from .reservations import ReservationLedger

__all__ = [
    'CatalogService',
    'CopyAvailable',
    'EventBus',
    'calculate_fine',
    'InventoryCoordinator',
    'InventoryReport',
    'LockRegistry',
    'LoanLedger',
    'ReservationLedger',
]
