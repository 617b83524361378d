"""
Receipt extraction tests.

Covers:
- Normalization rules shared by both strategies
- JSON scavenging and the line-oriented text layout
- All-or-nothing failure modes
- Capability probing in auto mode
"""

import anyio
import pytest

from adapters.vision_adapter import VisionError
from app.config import ExtractionStrategy
from app.exceptions import ExtractionFailedError, ServiceValidationError
from services.extraction_service import (
    normalize_receipt,
    parse_structured_response,
    parse_text_response,
    round_half_up,
)

from test_constants import STRUCTURED_REPLY, TEXT_REPLY
from test_fixtures import FakeVision, json_mode_refused, make_extractor

IMAGE = b"\x89PNG fake receipt bytes"


# =============================================================================
# NORMALIZATION
# =============================================================================


def test_normalize_rounds_price_and_clamps_confidence():
    result = normalize_receipt(
        {"items": [{"name": "Coffee beans", "price": 19.999999, "quantity": 1, "confidence": 1.4}]}
    )

    assert result.items[0].price == 20
    assert result.items[0].confidence == 1.0


@pytest.mark.parametrize(
    "raw,expected",
    [(2.5, 3), (0.5, 1), (1.49, 1), ("3,5", 4), ("12", 12), (-7, 0)],
)
def test_round_half_up(raw, expected):
    assert round_half_up(raw) == expected


def test_normalize_defaults():
    result = normalize_receipt(
        {
            "items": [
                {"name": "  Apples ", "price": 150, "quantity": 2},
                {"name": "Pears", "price": 100, "quantity": 1, "confidence": -0.2},
            ],
            "storeName": "   ",
            "date": "not a date",
        }
    )

    assert result.items[0].name == "Apples"
    assert result.items[0].confidence == 0.0
    assert result.items[1].confidence == 0.0
    assert result.language == "en"
    assert result.store_name is None
    assert result.date is None
    # missing total falls back to the sum of the lines
    assert result.total_amount == 400


def test_normalize_missing_quantity_counts_one():
    result = normalize_receipt({"items": [{"name": "Loaf", "price": 299}]})
    assert result.items[0].quantity == 1


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"items": "Milk"},
        {"items": [{"price": 100, "quantity": 1}]},
        {"items": [{"name": " ", "price": 100}]},
        {"items": [{"name": "Milk", "price": "free"}]},
        {"items": [{"name": "Milk", "price": None}]},
        {"items": [{"name": "Milk", "price": 100, "quantity": "lots"}]},
    ],
)
def test_normalize_rejects_malformed_payloads(raw):
    with pytest.raises(ExtractionFailedError):
        normalize_receipt(raw)


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def test_parse_structured_accepts_fenced_and_wrapped_json():
    fenced = "```json\n" + STRUCTURED_REPLY + "\n```"
    wrapped = "Here is the receipt:\n" + STRUCTURED_REPLY + "\nLet me know!"

    assert parse_structured_response(fenced)["storeName"] == "Corner Market"
    assert parse_structured_response(wrapped)["totalAmount"] == 448


def test_parse_structured_rejects_prose():
    with pytest.raises(ExtractionFailedError):
        parse_structured_response("Sorry, I cannot read this receipt.")


def test_parse_text_layout():
    raw = parse_text_response(TEXT_REPLY)
    result = normalize_receipt(raw)

    assert result.store_name == "Lidl"
    assert result.date == "2024-03-08"
    assert result.language == "de"
    assert result.total_amount == 577
    assert [i.name for i in result.items] == ["Vollmilch", "Roggenbrot", "Butter"]
    assert result.items[0].quantity == 2
    assert result.items[2].confidence == 0.0


def test_parse_text_rejects_unstructured_reply():
    with pytest.raises(ExtractionFailedError):
        parse_text_response("I see a blurry photo of a cat.")


# =============================================================================
# SERVICE
# =============================================================================


def test_structured_strategy_end_to_end():
    vision = FakeVision(structured=STRUCTURED_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.STRUCTURED)

    result = anyio.run(extractor.extract, IMAGE, "image/png")

    assert vision.calls == [True]
    assert result.store_name == "Corner Market"
    assert result.date == "2024-03-09"
    assert result.language == "en"
    assert len(result.items) == 2


def test_text_strategy_never_asks_for_json():
    vision = FakeVision(text=TEXT_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.TEXT)

    result = anyio.run(extractor.extract, IMAGE, "image/jpeg")

    assert vision.calls == [False]
    assert result.total_amount == 577


def test_auto_falls_back_to_text_and_remembers():
    """
    Verifies:
    - A refused JSON mode call is retried with the text layout
    - Later extractions skip the structured attempt entirely
    """
    vision = FakeVision(structured=json_mode_refused(), text=TEXT_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.AUTO)

    first = anyio.run(extractor.extract, IMAGE, "image/png")
    second = anyio.run(extractor.extract, IMAGE, "image/png")

    assert first.store_name == second.store_name == "Lidl"
    assert vision.calls == [True, False, False]
    assert extractor.structured_supported is False


def test_auto_keeps_structured_when_supported():
    vision = FakeVision(structured=STRUCTURED_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.AUTO)

    anyio.run(extractor.extract, IMAGE, "image/png")
    anyio.run(extractor.extract, IMAGE, "image/png")

    assert vision.calls == [True, True]
    assert extractor.structured_supported is True


def test_structured_strategy_does_not_fall_back():
    vision = FakeVision(structured=json_mode_refused(), text=TEXT_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.STRUCTURED)

    with pytest.raises(ExtractionFailedError):
        anyio.run(extractor.extract, IMAGE, "image/png")
    assert vision.calls == [True]


def test_upstream_error_becomes_extraction_failure():
    vision = FakeVision(structured=VisionError("Vision request failed", "connection reset"))
    extractor = make_extractor(vision, strategy=ExtractionStrategy.STRUCTURED)

    with pytest.raises(ExtractionFailedError) as exc_info:
        anyio.run(extractor.extract, IMAGE, "image/png")
    assert exc_info.value.diagnostic == "connection reset"


def test_timeout_becomes_extraction_failure():
    vision = FakeVision(text=TEXT_REPLY, delay=1.0)
    extractor = make_extractor(
        vision, strategy=ExtractionStrategy.TEXT, timeout_sec=0.05
    )

    with pytest.raises(ExtractionFailedError) as exc_info:
        anyio.run(extractor.extract, IMAGE, "image/png")
    assert "timed out" in exc_info.value.message


def test_empty_and_oversize_images_are_rejected_before_calling_upstream():
    vision = FakeVision(text=TEXT_REPLY)
    extractor = make_extractor(vision, strategy=ExtractionStrategy.TEXT, max_upload_bytes=16)

    with pytest.raises(ServiceValidationError):
        anyio.run(extractor.extract, b"", "image/png")
    with pytest.raises(ServiceValidationError):
        anyio.run(extractor.extract, b"x" * 17, "image/png")
    assert vision.calls == []
