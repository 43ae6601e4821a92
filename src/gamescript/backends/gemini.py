"""Google Gemini provider: one JSON-array request per batch."""

from __future__ import annotations

import json
import logging
import re

from gamescript.backends.base import TranslationProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

_RE_FENCE = re.compile(r"```(?:json)?\n?")

SYSTEM_PROMPT = """You are a professional game translator specializing in {engine} engine scripts.
Your task is to translate game dialogue and UI text from the source language to {target}.

CRITICAL RULES:
1. PRESERVE ALL ENGINE TAGS AND CONTROL CHARACTERS.
2. Maintain the tone and personality of characters.
3. If a line is just a command or technical tag without translatable text, return it as is.
4. Context: {context}.
5. Return the translations in the exact same order as the input."""


def build_prompt(
    texts: list[str],
    target_lang: str,
    format_hint: str | None,
    context: str | None,
) -> tuple[str, str]:
    """Return (system instruction, user prompt) for one batch."""
    system = SYSTEM_PROMPT.format(
        engine=format_hint or "generic",
        target=target_lang,
        context=context or "General game dialogue",
    )
    prompt = (
        f"Translate the following array of strings to {target_lang}. "
        f"Return a JSON array of strings.\n\nStrings to translate:\n"
        f"{json.dumps(texts, ensure_ascii=False)}"
    )
    return system, prompt


def parse_text(text: str | None) -> list[str]:
    """Pull the translated array out of the response text."""
    text = _RE_FENCE.sub("", text or "[]").strip()
    result = json.loads(text)
    if not isinstance(result, list):
        raise ValueError(f"Expected a JSON array, got {type(result).__name__}")
    return [item if isinstance(item, str) else str(item) for item in result]


class GeminiProvider(TranslationProvider):
    """Engine-aware LLM translation. A failed request echoes the whole batch."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL) -> None:
        try:
            from google import genai
            from google.genai import errors, types
        except ImportError:
            raise ImportError(
                "Gemini provider requires the 'google-genai' package. "
                "Install it with: pip install gamescript[gemini]"
            ) from None
        self._errors = errors
        self._types = types
        self._client = genai.Client(api_key=api_key)
        self._model = model

    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> list[str]:
        if not texts:
            return []
        system, prompt = build_prompt(texts, target_lang, format_hint, context)
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=self._types.GenerateContentConfig(
                    system_instruction=system,
                    response_mime_type="application/json",
                    response_schema=list[str],
                ),
            )
            translated = parse_text(response.text)
        except (self._errors.APIError, ConnectionError, TimeoutError, ValueError) as e:
            logger.warning("Gemini request failed, keeping originals: %s", e)
            return list(texts)
        if len(translated) != len(texts):
            logger.warning("Gemini returned %d items for %d strings", len(translated), len(texts))
        return [
            translated[i] if i < len(translated) and translated[i] else text
            for i, text in enumerate(texts)
        ]
