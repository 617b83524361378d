"""Schemas for receipt extraction and reconciliation"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from domain.enums import Unit
from domain.schemas.base import CamelModel
from domain.schemas.inventory_schemas import FoodItemResponse


class CandidateItem(CamelModel):
    """One extracted receipt line awaiting operator review"""

    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="Price in cents")
    quantity: int = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=1)


class ExtractionResult(CamelModel):
    items: List[CandidateItem] = Field(default_factory=list)
    language: str = "en"
    total_amount: int = Field(0, ge=0, description="Receipt total in cents")
    date: Optional[str] = Field(None, description="Receipt date (ISO)")
    store_name: Optional[str] = None


class ReconcileRequest(CamelModel):
    """Operator-approved subset of one extraction result"""

    items: List[CandidateItem] = Field(..., min_length=1)
    selected_indices: List[int] = Field(..., min_length=1)
    location_id: int = Field(..., description="Target location for selected items")
    item_locations: Dict[int, int] = Field(
        default_factory=dict, description="Per-index location overrides"
    )
    unit: Optional[Unit] = None
    expiry_date: Optional[date] = None
    receipt_date: Optional[date] = Field(
        None, alias="date", description="Receipt date, anchors the default expiry"
    )
    atomic: bool = False

    @model_validator(mode="after")
    def check_indices(self):
        if len(set(self.selected_indices)) != len(self.selected_indices):
            raise ValueError("selected_indices must not contain duplicates")
        out_of_range = [i for i in self.selected_indices if not 0 <= i < len(self.items)]
        if out_of_range:
            raise ValueError(f"selected_indices out of range: {out_of_range}")
        return self


class ReconcileFailure(CamelModel):
    index: int
    name: str
    reason: str


class ReconcileResult(CamelModel):
    created: List[FoodItemResponse] = Field(default_factory=list)
    failures: List[ReconcileFailure] = Field(default_factory=list)
