"""
Receipt Extraction Service - Turn a receipt image into candidate items.

Two strategies ask the vision model for the same information in different
shapes; both converge on ``normalize_receipt`` so downstream code only ever
sees an ``ExtractionResult``.
"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional
import json
import logging
import re

import anyio

from adapters.vision_adapter import (
    StructuredOutputUnsupported,
    VisionClient,
    VisionError,
)
from app.config import ExtractionStrategy
from app.exceptions import ExtractionFailedError, ServiceValidationError
from domain.schemas import CandidateItem, ExtractionResult

logger = logging.getLogger("freshtrack.extraction")

SYSTEM_PROMPT = (
    "You read grocery receipts. Report every purchased line item exactly once. "
    "Prices are integer cents. Confidence is a number between 0 and 1 for how "
    "sure you are about the item line."
)

STRUCTURED_PROMPT = (
    "Return a single JSON object with the keys: "
    '"items" (list of {"name", "price", "quantity", "confidence"}), '
    '"language" (ISO 639-1 code of the receipt), '
    '"totalAmount" (receipt total in cents), '
    '"date" (YYYY-MM-DD or null) and "storeName" (or null). '
    "Return JSON only."
)

TEXT_PROMPT = (
    "List the receipt using exactly this layout and nothing else:\n"
    "STORE: <store name or empty>\n"
    "DATE: <YYYY-MM-DD or empty>\n"
    "TOTAL: <total in cents>\n"
    "LANGUAGE: <ISO 639-1 code>\n"
    "ITEM: <name> | <quantity> | <price in cents> | <confidence>\n"
    "Write one ITEM line per purchased item."
)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_HEADER_RE = re.compile(r"^\s*(STORE|DATE|TOTAL|LANGUAGE)\s*:\s*(.*?)\s*$", re.IGNORECASE)
_ITEM_RE = re.compile(
    r"^\s*(?:ITEM\s*:|[-*])?\s*"
    r"(?P<name>[^|]+?)\s*\|\s*"
    r"(?P<quantity>[^|]+?)\s*\|\s*"
    r"(?P<price>[^|]+?)\s*\|\s*"
    r"(?P<confidence>[^|]*?)\s*$",
    re.IGNORECASE,
)
_HEADER_KEYS = {
    "store": "storeName",
    "date": "date",
    "total": "totalAmount",
    "language": "language",
}


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_structured_response(text: str) -> Dict[str, Any]:
    """
    Read a JSON object out of a model reply.

    Accepts bare JSON, JSON inside a ``` fence, or JSON wrapped in prose.
    """
    candidates = [text.strip()]
    fenced = _FENCE_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data

    raise ExtractionFailedError(
        "Vision model did not return a JSON object", diagnostic=text[:2000]
    )


def parse_text_response(text: str) -> Dict[str, Any]:
    """Parse the line-oriented STORE/DATE/TOTAL/LANGUAGE/ITEM layout"""
    raw: Dict[str, Any] = {}
    items: List[Dict[str, Any]] = []
    for line in text.splitlines():
        header = _HEADER_RE.match(line)
        if header:
            value = header.group(2)
            if value:
                raw[_HEADER_KEYS[header.group(1).lower()]] = value
            continue
        item = _ITEM_RE.match(line)
        if item:
            items.append(
                {
                    "name": item.group("name"),
                    "quantity": item.group("quantity"),
                    "price": item.group("price"),
                    "confidence": item.group("confidence") or None,
                }
            )

    if not items and not raw:
        raise ExtractionFailedError(
            "Vision model reply did not follow the receipt layout",
            diagnostic=text[:2000],
        )
    raw["items"] = items
    return raw


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _to_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} is not a number: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if "," in value and "." not in value:
            value = value.replace(",", ".")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field} is not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"{field} is not a number: {value!r}")
    return number


def round_half_up(value: Any, field: str = "value") -> int:
    """Round to the nearest integer, halves away from zero, floored at 0"""
    rounded = int(_to_decimal(value, field).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(rounded, 0)


def clamp_confidence(value: Any) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        number = float(_to_decimal(value, "confidence"))
    except ValueError:
        return 0.0
    return min(max(number, 0.0), 1.0)


def normalize_date(value: Any) -> Optional[str]:
    """Reduce a date or datetime string to ``YYYY-MM-DD``; unparseable -> None"""
    if value is None:
        return None
    text = str(value).strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return None


def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_receipt(raw: Mapping[str, Any]) -> ExtractionResult:
    """
    Coerce a loosely-typed extraction payload into an ``ExtractionResult``.

    Raises:
        ExtractionFailedError: If items are missing, an item has no name, or
            a price or quantity is not numeric
    """
    raw_items = raw.get("items")
    if not isinstance(raw_items, list):
        raise ExtractionFailedError(
            "Extraction payload has no item list", diagnostic=repr(raw)[:2000]
        )

    items: List[CandidateItem] = []
    for index, entry in enumerate(raw_items):
        if not isinstance(entry, Mapping):
            raise ExtractionFailedError(
                f"Item {index} is not an object", diagnostic=repr(entry)
            )
        name = _blank_to_none(entry.get("name"))
        if name is None:
            raise ExtractionFailedError(
                f"Item {index} has no name", diagnostic=repr(entry)
            )
        quantity = entry.get("quantity")
        try:
            price = round_half_up(entry.get("price"), "price")
            quantity = 1 if quantity is None else round_half_up(quantity, "quantity")
        except ValueError as e:
            raise ExtractionFailedError(
                f"Item {index} ({name}) is malformed", diagnostic=str(e)
            )
        items.append(
            CandidateItem(
                name=name,
                price=price,
                quantity=quantity,
                confidence=clamp_confidence(entry.get("confidence")),
            )
        )

    total = raw.get("totalAmount", raw.get("total_amount"))
    if total is None or (isinstance(total, str) and not total.strip()):
        total_amount = sum(i.price * i.quantity for i in items)
    else:
        try:
            total_amount = round_half_up(total, "totalAmount")
        except ValueError as e:
            raise ExtractionFailedError("Receipt total is malformed", diagnostic=str(e))

    language = _blank_to_none(raw.get("language"))
    return ExtractionResult(
        items=items,
        language=language.lower() if language else "en",
        total_amount=total_amount,
        date=normalize_date(raw.get("date")),
        store_name=_blank_to_none(raw.get("storeName", raw.get("store_name"))),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReceiptExtractionService:
    """
    Runs one vision call per upload and normalizes the reply.

    In ``auto`` mode the first structured call doubles as a capability probe:
    once the upstream refuses JSON mode the service sticks to the text layout
    for the rest of the process.
    """

    def __init__(
        self,
        vision: VisionClient,
        strategy: ExtractionStrategy = ExtractionStrategy.AUTO,
        timeout_sec: float = 60.0,
        max_upload_bytes: int = 5 * 1024 * 1024,
    ):
        self.vision = vision
        self.strategy = ExtractionStrategy(strategy)
        self.timeout_sec = timeout_sec
        self.max_upload_bytes = max_upload_bytes
        self.structured_supported: Optional[bool] = None

    def validate_image(self, image_bytes: bytes) -> None:
        if not image_bytes:
            raise ServiceValidationError(
                "No receipt image uploaded", details={"field": "receipt"}
            )
        if len(image_bytes) > self.max_upload_bytes:
            raise ServiceValidationError(
                "Receipt image too large",
                details={
                    "field": "receipt",
                    "size": len(image_bytes),
                    "max_bytes": self.max_upload_bytes,
                },
            )

    def _wants_structured(self) -> bool:
        if self.strategy == ExtractionStrategy.STRUCTURED:
            return True
        if self.strategy == ExtractionStrategy.TEXT:
            return False
        return self.structured_supported is not False

    async def _run_structured(self, image_bytes: bytes, content_type: Optional[str]):
        reply = await self.vision.complete(
            image_bytes, content_type, SYSTEM_PROMPT, STRUCTURED_PROMPT, json_mode=True
        )
        return parse_structured_response(reply)

    async def _run_text(self, image_bytes: bytes, content_type: Optional[str]):
        reply = await self.vision.complete(
            image_bytes, content_type, SYSTEM_PROMPT, TEXT_PROMPT, json_mode=False
        )
        return parse_text_response(reply)

    async def _extract_raw(self, image_bytes: bytes, content_type: Optional[str]):
        if self._wants_structured():
            try:
                raw = await self._run_structured(image_bytes, content_type)
            except StructuredOutputUnsupported:
                if self.strategy == ExtractionStrategy.STRUCTURED:
                    raise
                self.structured_supported = False
                logger.warning(
                    "Vision model %s rejected JSON mode; using text layout from now on",
                    self.vision.model,
                )
            else:
                self.structured_supported = True
                return raw
        return await self._run_text(image_bytes, content_type)

    async def extract(
        self,
        image_bytes: bytes,
        content_type: Optional[str] = None,
        owner_id: Optional[int] = None,
    ) -> ExtractionResult:
        """
        Extract candidate items from one receipt image.

        Raises:
            ServiceValidationError: If the image is empty or too large
            ExtractionFailedError: On any upstream, timeout or parsing failure
        """
        self.validate_image(image_bytes)
        try:
            with anyio.fail_after(self.timeout_sec):
                raw = await self._extract_raw(image_bytes, content_type)
            result = normalize_receipt(raw)
        except TimeoutError:
            logger.error(f"Receipt extraction timed out for user {owner_id}")
            raise ExtractionFailedError(
                "Receipt extraction timed out",
                diagnostic=f"no reply within {self.timeout_sec}s",
            )
        except VisionError as e:
            logger.error(f"Receipt extraction failed for user {owner_id}: {e.diagnostic}")
            raise ExtractionFailedError(str(e), diagnostic=e.diagnostic)
        except ExtractionFailedError as e:
            logger.error(f"Receipt extraction failed for user {owner_id}: {e.diagnostic}")
            raise

        logger.info(
            f"Extracted {len(result.items)} items for user {owner_id} "
            f"(total={result.total_amount}, store={result.store_name})"
        )
        return result
