"""Query completion with a remote-first, static-fallback policy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from result import Err

from fsearch.services.synthetic import static_suggestions

if TYPE_CHECKING:
    from fsearch.data.protocols import SuggestionBackend

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5


class SuggestionResolver:
    """Maps a partial query to a short list of completions."""

    def __init__(
        self,
        backend: SuggestionBackend | None = None,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> None:
        self._backend = backend
        self._limit = limit

    async def get_suggestions(self, partial: str) -> list[str]:
        """Remote completions, or filtered static phrases when the remote fails.

        Blank input returns an empty list without calling anything.
        """
        if not partial.strip():
            return []
        if self._backend is not None:
            try:
                response = await self._backend.suggest(partial)
            except Exception:
                logger.warning("Suggestion backend raised for %r", partial, exc_info=True)
            else:
                if isinstance(response, Err):
                    logger.warning("Suggestion backend unavailable: %s", response.err_value)
                else:
                    return response.ok_value[: self._limit]
        return static_suggestions(partial, self._limit)
