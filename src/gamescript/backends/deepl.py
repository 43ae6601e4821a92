"""DeepL API translation provider."""

from __future__ import annotations

import asyncio
import logging

from gamescript.backends.base import TranslationProvider

logger = logging.getLogger(__name__)

# DeepL free tier limits
MAX_BATCH_SIZE = 50
RATE_LIMIT_RETRY_SECONDS = 1.0
MAX_RETRIES = 3


class DeepLProvider(TranslationProvider):
    """Translation provider using the DeepL API."""

    name = "deepl"

    def __init__(self, api_key: str) -> None:
        try:
            import deepl
        except ImportError:
            raise ImportError(
                "DeepL provider requires the 'deepl' package. "
                "Install it with: pip install gamescript[deepl]"
            ) from None
        self._deepl = deepl
        self._translator = deepl.Translator(api_key)

    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        format_hint: str | None = None,
        context: str | None = None,
    ) -> list[str]:
        """Translate texts using DeepL, handling rate limits and batching."""
        if not texts:
            return []

        results: list[str] = []

        for i in range(0, len(texts), MAX_BATCH_SIZE):
            batch = texts[i : i + MAX_BATCH_SIZE]
            translated = await self._translate_with_retry(batch, target_lang, context)
            results.extend(translated)

        return results

    async def _translate_with_retry(
        self,
        texts: list[str],
        target_lang: str,
        context: str | None,
    ) -> list[str]:
        """Translate a single batch with retry on rate limit.

        The deepl client is blocking; a run has a single task, so nothing
        else waits on the event loop meanwhile.
        """
        kwargs: dict[str, str] = {"target_lang": target_lang}
        if context:
            kwargs["context"] = context

        for attempt in range(MAX_RETRIES):
            try:
                result = self._translator.translate_text(texts, **kwargs)
                # translate_text returns a list of TextResult when given a list
                if isinstance(result, list):
                    return [r.text for r in result]
                return [result.text]

            except self._deepl.QuotaExceededException:
                raise

            except (self._deepl.DeepLException, ConnectionError, TimeoutError) as e:
                if attempt < MAX_RETRIES - 1:
                    logger.debug("DeepL attempt %d failed: %s", attempt + 1, e)
                    await asyncio.sleep(RATE_LIMIT_RETRY_SECONDS * (attempt + 1))
                else:
                    raise

        return texts  # unreachable, but satisfies type checker
