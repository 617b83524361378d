"""
Adapters package - External service connections.
Vision model client used for receipt extraction.
"""

from adapters.vision_adapter import (
    StructuredOutputUnsupported,
    VisionClient,
    VisionError,
)

__all__ = [
    "StructuredOutputUnsupported",
    "VisionClient",
    "VisionError",
]
