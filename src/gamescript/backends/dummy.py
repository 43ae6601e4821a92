"""Dummy translation provider for testing: prefixes strings with [XX] tag."""

from __future__ import annotations

from gamescript.backends.base import TranslationProvider


class DummyProvider(TranslationProvider):
    """Test provider that prefixes each string with the target language tag.

    Example: "Attack" → "[ES] Attack"
    """

    name = "dummy"

    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> list[str]:
        tag = f"[{target_lang.upper()}]"
        return [f"{tag} {text}" for text in texts]
