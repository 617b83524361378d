"""Services package - Business logic layer"""

from services.analytics_service import AnalyticsService
from services.auth_service import AuthService
from services.expiry_service import ExpiryService
from services.extraction_service import ReceiptExtractionService
from services.inventory_service import InventoryService
from services.reconciliation_service import ReconciliationService

# Note: expiry_service also exposes the classify/days_until_expiry functions

__all__ = [
    "AnalyticsService",
    "AuthService",
    "ExpiryService",
    "ReceiptExtractionService",
    "InventoryService",
    "ReconciliationService",
]
