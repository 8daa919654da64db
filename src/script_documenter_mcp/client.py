"""Shared Gemini client singleton."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from .config import get_config

logger = logging.getLogger(__name__)


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str | None = None) -> genai.Client:
        """Return (or create) the shared client for *api_key*.

        Raises:
            ConfigurationError: If no key is passed and none is configured.
        """
        key = api_key or get_config().require_api_key()
        if key not in cls._clients:
            cls._clients[key] = genai.Client(api_key=key)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls._clients[key]

    @classmethod
    async def generate(
        cls,
        contents: Any,
        *,
        model: str | None = None,
        temperature: float | None = None,
        system_instruction: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text via Gemini in a single request.

        There is no retry here: a failed call surfaces to the caller as-is.

        Args:
            contents: Prompt contents (the raw script text for documentation).
            model: Override model ID (defaults to config's default_model).
            temperature: Override temperature (defaults to config's default).
            system_instruction: System-level instruction (policy + context).
            **kwargs: Forwarded to the underlying generate_content call.

        Returns:
            The model's text response with thinking parts stripped.
        """
        cfg = get_config()
        resolved_model = model or cfg.default_model
        resolved_temperature = temperature if temperature is not None else cfg.default_temperature

        config = types.GenerateContentConfig()
        if resolved_temperature is not None:
            config.temperature = resolved_temperature
        if system_instruction:
            config.system_instruction = system_instruction

        client = cls.get()
        response = await client.aio.models.generate_content(
            model=resolved_model,
            contents=contents,
            config=config,
            **kwargs,
        )

        # Strip thinking parts: only return user-visible text
        candidates = response.candidates or []
        content = candidates[0].content if candidates else None
        parts = (content.parts or []) if content else []
        text_parts = [p.text for p in parts if p.text and not getattr(p, "thought", False)]
        return "".join(text_parts) if text_parts else (response.text or "")

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Async client close failed", exc_info=True)
            try:
                client.close()
            except Exception:
                logger.debug("Sync client close failed", exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
