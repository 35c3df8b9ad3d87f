"""
================================================================================
AI Observer
================================================================================

LLM-assisted selector inference used by the last two healing tiers.

Components:
    - InferenceRequest / InferenceResponse: narrow contract at the model edge
    - InferenceClient: abstract transport (AnthropicInferenceClient by default)
    - AIObserver: "find this element" from a screenshot or from page markup
    - is_valid_selector: rejects answers that are not a usable selector

Every inference failure (transport error, timeout, malformed response,
rejected answer) is reported to the caller as None. The engine only needs to
know that this tier produced nothing.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from anthropic import AsyncAnthropic
from loguru import logger

from selfheal_tools.common import get_config

from .element_registry import ElementKind


MAX_SELECTOR_LENGTH = 150
HEDGING_MARKERS = ("sorry", "cannot", "unable")
NOT_FOUND_SENTINEL = "NOT_FOUND"

VISION_INSTRUCTION = """You are a test automation expert. Analyze this screenshot and find the CSS selector for a {kind} element that matches this description: "{description}".

Prioritize selectors in this order:
1. data-testid or data-test attributes
2. id attribute
3. aria-label or role attributes
4. unique class combinations
5. text content selectors (:has-text())

Return ONLY the CSS selector, nothing else. No explanation.
If you cannot find it, return "NOT_FOUND".

CSS Selector:"""

MARKUP_INSTRUCTION = """You are a test automation expert. Analyze this HTML and find the CSS selector for a {kind} element that matches this description: "{description}".

HTML (truncated):
```html
{html}
```

Prioritize selectors in this order:
1. data-testid or data-test attributes
2. id attribute
3. aria-label or role attributes
4. unique class combinations
5. text content selectors (:has-text())

Return ONLY the CSS selector, nothing else. No explanation.
If you cannot find it, return "NOT_FOUND".

CSS Selector:"""

SUGGEST_INSTRUCTION = """Analyze this HTML and suggest 5 different CSS selectors for an element matching: "{description}".

HTML:
{html}

Return ONLY a JSON array of selectors, e.g.: ["selector1", "selector2", "selector3"]"""


class InferenceResponseError(Exception):
    """The model answered with a shape the adapter does not understand."""
    pass


@dataclass(frozen=True)
class InferenceRequest:
    """One prompt sent to the model, optionally with a PNG screenshot."""

    instruction: str
    image: Optional[bytes] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class InferenceResponse:
    text: str


class InferenceClient(ABC):
    """Transport for a single request/response exchange with a model."""

    @abstractmethod
    async def complete(self, request: InferenceRequest) -> InferenceResponse:
        ...


class AnthropicInferenceClient(InferenceClient):
    """
    Claude transport built on `anthropic.AsyncAnthropic`.

    Args:
        api_key: Anthropic API key (required)
        model: Model identifier
        max_tokens: Response token cap
        timeout_s: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 300,
        timeout_s: float = 30.0,
    ):
        if not api_key:
            raise ValueError(
                "Anthropic API key required. Pass api_key or set ANTHROPIC_API_KEY env var."
            )
        self.model = model
        self.max_tokens = max_tokens
        # Retries are left to the healing tiers, not the transport
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout_s, max_retries=0)

    @staticmethod
    def build_content(request: InferenceRequest) -> Union[str, List[dict]]:
        prompt = request.instruction
        if request.text:
            prompt = f"{prompt}\n\n{request.text}"
        if request.image is None:
            return prompt
        return [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": base64.b64encode(request.image).decode("ascii"),
                },
            },
            {"type": "text", "text": prompt},
        ]

    @staticmethod
    def parse_message(message: Any) -> InferenceResponse:
        """Extract the first text block; anything else is a response error."""
        blocks = getattr(message, "content", None)
        if not blocks:
            raise InferenceResponseError("Model returned no content blocks")
        for block in blocks:
            text = getattr(block, "text", None)
            if getattr(block, "type", None) == "text" and isinstance(text, str):
                return InferenceResponse(text=text)
        raise InferenceResponseError("Model response contains no text block")

    async def complete(self, request: InferenceRequest) -> InferenceResponse:
        message = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=0,
            messages=[{"role": "user", "content": self.build_content(request)}],
        )
        return self.parse_message(message)


def clean_candidate(raw: Optional[str]) -> str:
    """Trim whitespace and a single pair of wrapping backticks."""
    candidate = (raw or "").strip()
    if len(candidate) >= 2 and candidate.startswith("`") and candidate.endswith("`"):
        candidate = candidate[1:-1].strip()
    return candidate


def _positive(name: str, value: Any) -> Any:
    if float(value) <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def is_valid_selector(candidate: Optional[str]) -> bool:
    """
    Accept a model answer only if it looks like a bare selector.

    Rejects empty answers, answers over MAX_SELECTOR_LENGTH characters,
    multi-line answers, the NOT_FOUND sentinel and hedged prose
    ("Sorry, I cannot ...").
    """
    if not candidate:
        return False
    if len(candidate) > MAX_SELECTOR_LENGTH:
        return False
    if "\n" in candidate or "\r" in candidate:
        return False
    if candidate.strip().upper() == NOT_FOUND_SENTINEL:
        return False
    lowered = candidate.lower()
    return not any(marker in lowered for marker in HEDGING_MARKERS)


class AIObserver:
    """
    AI-assisted element finder for the AI visual and AI DOM healing tiers.

    Enabled only when an inference client is injected, or when an API key is
    configured (`ANTHROPIC_API_KEY` / `ai.api_key`) and `ai.enabled` is not
    false. The decision is made once, at construction.

    Usage:
        >>> observer = AIObserver()
        >>> if observer.is_enabled():
        ...     selector = await observer.infer_from_image(png, "Login button", "button")
    """

    def __init__(
        self,
        client: Optional[InferenceClient] = None,
        *,
        api_key: Optional[str] = None,
        enabled: Optional[bool] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        dom_char_limit: Optional[int] = None,
        timeout_s: Optional[float] = None,
    ):
        if dom_char_limit is None:
            dom_char_limit = get_config("ai.dom_char_limit", 15000)
        if timeout_s is None:
            timeout_s = get_config("ai.timeout_s", 30)
        if max_tokens is None:
            max_tokens = get_config("ai.max_tokens", 300)
        self.dom_char_limit = int(_positive("dom_char_limit", dom_char_limit))
        self.timeout_s = float(_positive("timeout_s", timeout_s))
        self.max_tokens = int(_positive("max_tokens", max_tokens))
        self.model = model or get_config("ai.model", "claude-sonnet-4-20250514")

        if enabled is None:
            enabled = bool(get_config("ai.enabled", True))

        self._client: Optional[InferenceClient] = None
        if client is not None:
            self._client = client if enabled else None
        elif enabled:
            key = api_key or get_config("ai.api_key")
            if key:
                self._client = AnthropicInferenceClient(
                    api_key=str(key),
                    model=self.model,
                    max_tokens=self.max_tokens,
                    timeout_s=self.timeout_s,
                )

        self._enabled = self._client is not None
        if self._enabled:
            logger.debug(f"AIObserver enabled (model={self.model})")
        else:
            logger.info(
                "AIObserver running without AI "
                "(set ANTHROPIC_API_KEY for AI-powered healing)"
            )

    def is_enabled(self) -> bool:
        return self._enabled

    async def infer_from_image(
        self,
        screenshot: bytes,
        description: str,
        kind: Union[ElementKind, str],
        timeout_ms: Optional[float] = None,
    ) -> Optional[str]:
        """Ask the model for a selector based on a PNG screenshot."""
        request = InferenceRequest(
            instruction=VISION_INSTRUCTION.format(
                kind=ElementKind(kind).value, description=description
            ),
            image=screenshot,
        )
        return await self._infer_selector(request, "vision", timeout_ms)

    async def infer_from_markup(
        self,
        html: str,
        description: str,
        kind: Union[ElementKind, str],
        timeout_ms: Optional[float] = None,
    ) -> Optional[str]:
        """Ask the model for a selector based on serialized page markup."""
        request = InferenceRequest(
            instruction=MARKUP_INSTRUCTION.format(
                kind=ElementKind(kind).value,
                description=description,
                html=html[: self.dom_char_limit],
            ),
        )
        return await self._infer_selector(request, "markup", timeout_ms)

    async def suggest_selectors(
        self,
        html: str,
        description: str,
        timeout_ms: Optional[float] = None,
    ) -> List[str]:
        """Ask for several candidate selectors; returns [] on any failure."""
        request = InferenceRequest(
            instruction=SUGGEST_INSTRUCTION.format(
                description=description, html=html[: self.dom_char_limit]
            ),
        )
        text = await self._complete(request, "suggest", timeout_ms)
        if text is None:
            return []
        try:
            candidates = json.loads(text.strip())
        except json.JSONDecodeError:
            logger.warning("AIObserver suggestion was not a JSON array")
            return []
        if not isinstance(candidates, list):
            return []
        return [
            clean_candidate(c) for c in candidates
            if isinstance(c, str) and is_valid_selector(clean_candidate(c))
        ]

    async def _infer_selector(
        self,
        request: InferenceRequest,
        mode: str,
        timeout_ms: Optional[float],
    ) -> Optional[str]:
        text = await self._complete(request, mode, timeout_ms)
        if text is None:
            return None
        candidate = clean_candidate(text)
        if not is_valid_selector(candidate):
            logger.warning(f"AIObserver {mode} answer rejected: {candidate[:60]!r}")
            return None
        logger.debug(f"AIObserver {mode} suggested: {candidate}")
        return candidate

    async def _complete(
        self,
        request: InferenceRequest,
        mode: str,
        timeout_ms: Optional[float],
    ) -> Optional[str]:
        if self._client is None:
            return None

        timeout_s = self.timeout_s
        if timeout_ms is not None:
            timeout_s = min(timeout_s, timeout_ms / 1000)
        if timeout_s <= 0:
            return None

        try:
            response = await asyncio.wait_for(self._client.complete(request), timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"AIObserver {mode} inference timed out after {timeout_s:.2f}s")
            return None
        except Exception as e:
            # Rate limits, transport errors and malformed responses look the same to callers
            logger.warning(f"AIObserver {mode} inference failed: {e}")
            return None

        if not isinstance(response, InferenceResponse) or not response.text.strip():
            return None
        return response.text


__all__ = [
    "AIObserver",
    "AnthropicInferenceClient",
    "InferenceClient",
    "InferenceRequest",
    "InferenceResponse",
    "InferenceResponseError",
    "MAX_SELECTOR_LENGTH",
    "is_valid_selector",
]
