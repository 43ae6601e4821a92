"""Abstract base class for translation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TranslationProvider(ABC):
    """Interface for translation providers.

    Providers are order preserving: result ``i`` is the translation of input
    ``i``. Item-level failures echo the original text instead of raising.
    """

    name: str = "provider"

    @abstractmethod
    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> list[str]:
        """Translate a batch of texts.

        Args:
            texts: Strings to translate.
            target_lang: Target language (code or name, provider dependent).
            format_hint: Engine tag of the source file, e.g. "kirikiri".
            context: Free-form hint about where the strings come from.

        Returns:
            List of translated strings, same length as input.
        """
        ...

    async def translate(
        self,
        text: str,
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> str:
        """Translate a single text. Default implementation uses translate_batch."""
        results = await self.translate_batch([text], target_lang, format_hint, context)
        return results[0] if results else text

    async def close(self) -> None:
        """Release network resources. No-op by default."""
