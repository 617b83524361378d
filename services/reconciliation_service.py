"""
Reconciliation Service - Commit operator-approved receipt lines as food items.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional
import logging

from pydantic import ValidationError

from app.config import settings
from app.exceptions import ServiceValidationError
from domain.schemas import (
    CandidateItem,
    FoodItemCreate,
    ReconcileFailure,
    ReconcileRequest,
    ReconcileResult,
)
from repositories import InventoryStore

logger = logging.getLogger("freshtrack.reconciliation")


class ReconciliationService:
    @staticmethod
    def default_expiry(
        anchor: date, default_expiry_days: Optional[int] = None
    ) -> date:
        days = settings.default_expiry_days if default_expiry_days is None else default_expiry_days
        return anchor + timedelta(days=days)

    @staticmethod
    def build_item(
        candidate: CandidateItem,
        location_id: int,
        unit: str,
        expiry_date: date,
    ) -> FoodItemCreate:
        return FoodItemCreate(
            name=candidate.name,
            quantity=candidate.quantity if candidate.quantity > 0 else 1,
            unit=unit,
            location_id=location_id,
            expiry_date=expiry_date,
            price=candidate.price,
        )

    @staticmethod
    def commit(
        store: InventoryStore,
        owner_id: int,
        request: ReconcileRequest,
        now: Optional[datetime] = None,
        default_unit: Optional[str] = None,
        default_expiry_days: Optional[int] = None,
    ) -> ReconcileResult:
        """
        Create one food item per selected candidate.

        Each candidate is checked on its own: a bad location or an item that
        fails validation becomes a ``ReconcileFailure`` and the rest are still
        created. With ``request.atomic`` any failure rejects the whole batch.

        Raises:
            ServiceValidationError: In atomic mode, when any candidate failed
        """
        now = now or datetime.now(timezone.utc)
        unit = request.unit or default_unit or settings.default_unit
        anchor = request.receipt_date or now.astimezone(timezone.utc).date()
        expiry = request.expiry_date or ReconciliationService.default_expiry(
            anchor, default_expiry_days
        )

        owned = {loc.id for loc in store.list_locations(owner_id)}
        payloads: List[FoodItemCreate] = []
        failures: List[ReconcileFailure] = []
        overrides: Dict[int, int] = request.item_locations

        for index in request.selected_indices:
            candidate = request.items[index]
            location_id = overrides.get(index, request.location_id)
            if location_id not in owned:
                failures.append(
                    ReconcileFailure(
                        index=index,
                        name=candidate.name,
                        reason=f"Unknown location {location_id}",
                    )
                )
                continue
            try:
                payloads.append(
                    ReconciliationService.build_item(candidate, location_id, unit, expiry)
                )
            except ValidationError as e:
                failures.append(
                    ReconcileFailure(
                        index=index,
                        name=candidate.name,
                        reason=e.errors()[0]["msg"],
                    )
                )

        if failures and request.atomic:
            logger.warning(
                f"Rejected atomic reconciliation for user {owner_id}: "
                f"{len(failures)} of {len(request.selected_indices)} items failed"
            )
            raise ServiceValidationError(
                "Reconciliation rejected: some selected items are invalid",
                details={"failures": [f.model_dump(by_alias=True) for f in failures]},
            )

        created = store.create_food_items(owner_id, payloads, purchased=now) if payloads else []
        logger.info(
            f"Reconciled {len(created)} items for user {owner_id}; "
            f"failed indices: {[f.index for f in failures]}"
        )
        return ReconcileResult(created=created, failures=failures)
