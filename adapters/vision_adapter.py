"""
Vision adapter - OpenAI chat completions over a receipt image.

The adapter only moves bytes and text; prompt wording, response parsing and
normalization belong to the extraction service.
"""

import base64
import logging
from typing import Optional

from openai import APIError, AsyncOpenAI, BadRequestError, OpenAIError

logger = logging.getLogger("freshtrack.vision")

DEFAULT_CONTENT_TYPE = "image/jpeg"


class VisionError(Exception):
    """Upstream vision call failed; ``diagnostic`` carries the raw reason"""

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message)
        self.diagnostic = diagnostic or message


class StructuredOutputUnsupported(VisionError):
    """The upstream model rejected JSON response mode"""


def to_data_url(image_bytes: bytes, content_type: Optional[str] = None) -> str:
    b64 = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{b64}"


class VisionClient:
    """Thin async wrapper around ``AsyncOpenAI`` for single-image prompts."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 1500,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        # Built lazily so a process without an API key still starts
        if self._client is None:
            try:
                self._client = AsyncOpenAI(
                    api_key=self.api_key or None,
                    base_url=self.base_url,
                    timeout=self.timeout,
                    max_retries=0,
                )
            except OpenAIError as e:
                raise VisionError("Vision client is not configured", str(e))
        return self._client

    async def complete(
        self,
        image_bytes: bytes,
        content_type: Optional[str],
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
    ) -> str:
        """
        Send one image with prompts and return the message text.

        Raises:
            StructuredOutputUnsupported: If ``json_mode`` was refused upstream
            VisionError: On any other upstream failure or empty content
        """
        client = self._get_client()
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        messages = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": to_data_url(image_bytes, content_type)},
                    },
                ],
            },
        ]

        logger.debug(
            "Calling vision model %s (json_mode=%s, %d bytes)",
            self.model,
            json_mode,
            len(image_bytes),
        )
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=0,
                **kwargs,
            )
        except BadRequestError as e:
            if json_mode:
                raise StructuredOutputUnsupported(
                    f"Model {self.model} rejected JSON response mode", str(e)
                )
            raise VisionError("Vision request was rejected", str(e))
        except APIError as e:
            raise VisionError(f"Vision request failed: {type(e).__name__}", str(e))

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise VisionError("Vision model returned empty content", repr(response))
        return content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
