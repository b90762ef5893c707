"""Per-run state shared by the pipeline stages."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class ResearchContext:
    """Tracks which URLs were already evaluated during one research run.

    URLs are namespaced by target brand, so a competitor branch can evaluate a
    thread that the main brand already saw. A context is created per run and
    never shared between runs.
    """

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id
        self._processed: set[tuple[str, str]] = set()
        self._lock = asyncio.Lock()

    @staticmethod
    def _key(namespace: str, url: str) -> tuple[str, str]:
        return (namespace.strip().lower(), url.strip())

    async def claim_url(self, namespace: str, url: str) -> bool:
        """Mark ``url`` as evaluated for ``namespace``.

        Returns:
            True if this call claimed the URL, False if it was already claimed
        """
        key = self._key(namespace, url)
        async with self._lock:
            if key in self._processed:
                return False
            self._processed.add(key)
            return True

    def is_processed(self, namespace: str, url: str) -> bool:
        return self._key(namespace, url) in self._processed

    @property
    def processed_count(self) -> int:
        return len(self._processed)
