"""Session facade over one record store.

This is the main integration point for callers (MCP tools, CLI, tests): it
owns a ``RecordStore`` and exposes the query surface. Sessions share no state,
so several can live side by side.
"""

from __future__ import annotations

import gzip
import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .aggregation import service_breakdown, summarize, timeline, top_errors
from .config import EngineConfig, resolve_engine_config
from .correlation import group_by_request, related
from .filtering import FilterSpec, apply_filter
from .highlight import highlight
from .models import ErrorGroup, HighlightSpan, LoadResult, LogRecord, ServiceSummary, Stats, TimelineBucket
from .samples import generate_sample_text
from .store import Clock, RecordStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


class LogSession:
    def __init__(self, *, config: EngineConfig | None = None, clock: Clock | None = None) -> None:
        self.config = resolve_engine_config(config)
        self.store = RecordStore(clock=clock)

    def _ingest(self, raw_text: object, *, replace: bool) -> LoadResult:
        try:
            count = self.store.load(raw_text) if replace else self.store.append(raw_text)
        except TypeError as e:
            logger.warning("Rejected log input: %s", e)
            return LoadResult(count=0, errors=(str(e),))
        return LoadResult(count=count)

    def load(self, raw_text: str) -> LoadResult:
        """Replace the session contents with ``raw_text``."""
        return self._ingest(raw_text, replace=True)

    def append(self, raw_text: str) -> LoadResult:
        """Add ``raw_text`` after the current contents (live tail)."""
        return self._ingest(raw_text, replace=False)

    def load_sample(self, count: int | None = None, *, seed: int = 7) -> LoadResult:
        size = self.config.sample_size if count is None else count
        return self.load(generate_sample_text(size, seed=seed))

    async def load_file(
        self,
        path: str | Path,
        *,
        append: bool = False,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> LoadResult:
        """Read a plain or gzipped log file and load (or append) it."""
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Log file not found: {p}")
        async with _open_text(p, encoding=encoding, decode_errors=decode_errors) as f:
            text = await f.read()
        return self._ingest(text, replace=not append)

    def clear(self) -> None:
        self.store.clear()

    def get_all(self) -> Sequence[LogRecord]:
        return self.store.all()

    def get(self, record_id: str) -> LogRecord | None:
        return self.store.get(record_id)

    def apply_filter(self, spec: FilterSpec | None = None) -> list[LogRecord]:
        return apply_filter(
            self.store.all(), spec or FilterSpec(), regex_timeout=self.config.regex_timeout
        )

    def summarize(self, records: Sequence[LogRecord] | None = None) -> Stats:
        return summarize(self.store.all() if records is None else records)

    def timeline(
        self,
        records: Sequence[LogRecord] | None = None,
        target_buckets: int | None = None,
    ) -> list[TimelineBucket]:
        target = self.config.target_buckets if target_buckets is None else target_buckets
        return timeline(
            self.store.all() if records is None else records,
            target_buckets=target,
            max_buckets=max(self.config.max_buckets, target * 2),
        )

    def services(self, records: Sequence[LogRecord] | None = None) -> list[ServiceSummary]:
        return service_breakdown(self.store.all() if records is None else records)

    def top_errors(self, records: Sequence[LogRecord] | None = None, *, limit: int = 5) -> list[ErrorGroup]:
        return top_errors(self.store.all() if records is None else records, limit=limit)

    def related(self, request_id: str | None) -> list[LogRecord]:
        return related(self.store.all(), request_id)

    def request_groups(self, records: Sequence[LogRecord] | None = None) -> dict[str, list[LogRecord]]:
        """Records grouped by request id, ids in first-seen order."""
        return group_by_request(self.store.all() if records is None else records)

    def highlight(self, message: str) -> list[HighlightSpan]:
        return highlight(message)
