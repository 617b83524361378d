"""Receipt upload and reconciliation routes"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
import logging

from api.dependencies import get_current_user, get_extractor, get_settings, get_store
from app.config import Settings
from app.exceptions import ServiceValidationError
from domain.schemas import (
    ExtractionResult,
    ReconcileRequest,
    ReconcileResult,
    UserRecord,
)
from repositories import InventoryStore
from services.extraction_service import ReceiptExtractionService
from services.reconciliation_service import ReconciliationService

router = APIRouter(prefix="/receipts", tags=["Receipts"])
logger = logging.getLogger("freshtrack.api.receipts")


async def read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    """Read at most one byte past the cap; anything longer is rejected anyway"""
    return await upload.read(max_bytes + 1)


@router.post(
    "/upload", response_model=ExtractionResult, response_model_exclude_none=True
)
async def upload_receipt(
    receipt: Optional[UploadFile] = File(None),
    user: UserRecord = Depends(get_current_user),
    extractor: ReceiptExtractionService = Depends(get_extractor),
):
    """
    Extract candidate items from a receipt image.

    Nothing is stored: the operator reviews the candidates and sends the
    approved subset to ``/receipts/commit``.
    """
    if receipt is None:
        raise ServiceValidationError(
            "No receipt image uploaded", details={"field": "receipt"}
        )
    try:
        image_bytes = await read_limited(receipt, extractor.max_upload_bytes)
    finally:
        await receipt.close()

    logger.info(
        f"Receipt upload from user {user.id}: {receipt.filename} "
        f"({receipt.content_type}, {len(image_bytes)} bytes)"
    )
    return await extractor.extract(image_bytes, receipt.content_type, owner_id=user.id)


@router.post(
    "/commit", response_model=ReconcileResult, status_code=status.HTTP_201_CREATED
)
def commit_receipt(
    payload: ReconcileRequest,
    user: UserRecord = Depends(get_current_user),
    store: InventoryStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
):
    """Create food items from the selected candidates"""
    return ReconciliationService.commit(
        store,
        user.id,
        payload,
        default_unit=app_settings.default_unit,
        default_expiry_days=app_settings.default_expiry_days,
    )
