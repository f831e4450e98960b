import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Sequence

import structlog

from ccstat.blocks import SESSION_BLOCK_DURATION, as_utc, format_timestamp
from ccstat.cost import CostCalculator
from ccstat.dedup import DeduplicationStore
from ccstat.discovery import UsageFile, discover_usage_files
from ccstat.errors import RecordParseError
from ccstat.ids import SessionId
from ccstat.metrics import LoaderMetrics
from ccstat.models import UsageRecord, UsageRecordData
from ccstat.snapshot import Snapshot, local_midnight, timestamp_sort_key

logger = structlog.get_logger()


def parse_lines(
    text: "str",
    session_id: "SessionId",
) -> "tuple[list[UsageRecord], int]":
    """
    parses the non-blank lines of one usage log. Returns the records
    and the number of lines that did not parse; a log that is being
    written usually ends with a partial line.
    """
    records: "list[UsageRecord]" = []
    dropped = 0
    for line in text.split("\n"):
        line = line.removesuffix("\r")
        if not line.strip():
            continue
        try:
            data = UsageRecordData.from_json(line)
        except RecordParseError:
            dropped += 1
            continue
        records.append(UsageRecord(session_id=session_id, data=data))

    return records, dropped


@dataclass(frozen=True, slots=True)
class RecencyFilter:
    """
    RecencyFilter drops old records while loading to keep memory
    bounded. Records of the current session, and records without a
    timestamp, are always kept.
    """

    cutoff: "str"
    current_session: "SessionId | None" = None

    @classmethod
    def for_now(
        cls,
        now: "datetime",
        current_session: "SessionId | None" = None,
        block_duration: "timedelta" = SESSION_BLOCK_DURATION,
    ) -> "RecencyFilter":
        """
        keeps one block duration before local midnight, so a block
        spanning midnight stays whole, and at least two block durations
        before now, so the active block and its predecessor stay whole.
        """
        today_cutoff = local_midnight(now) - block_duration
        lookback = as_utc(now) - 2 * block_duration
        return cls(
            cutoff=format_timestamp(min(today_cutoff, lookback)),
            current_session=current_session,
        )

    def keep(self, record: "UsageRecord") -> "bool":
        if self.current_session is not None and record.session_id == self.current_session:
            return True
        if record.timestamp is None:
            return True
        return record.timestamp >= self.cutoff


class UsageLoader:
    """
    UsageLoader builds a Snapshot from the usage logs of one or more
    data directories.

    Every data directory is loaded by its own worker thread and the
    workers are awaited together. Within a worker, files are read one
    after the other and each file's records are deduplicated, as one
    batch, against a DeduplicationStore shared by all workers. The
    merged records are sorted by timestamp at the end, so neither the
    order of the workers nor the order of files matters.

    Unreadable files and unparseable lines only shrink the result.
    A data directory that cannot be enumerated fails the whole load.
    """

    def __init__(
        self,
        calculator: "CostCalculator",
        metrics: "LoaderMetrics",
        record_filter: "RecencyFilter | None" = None,
        now: "datetime | None" = None,
    ) -> "None":
        self._calculator = calculator
        self._metrics = metrics
        self._filter = record_filter
        self._now = now

    async def load(self, base_dirs: "Iterable[Path | str]") -> "Snapshot":
        started = time.monotonic()
        store = DeduplicationStore()
        dirs = [Path(d) for d in base_dirs]

        logger.info("load_start", base_dirs=[str(d) for d in dirs])
        tasks = [asyncio.to_thread(self._load_base_dir, d, store) for d in dirs]
        results: "Sequence[list[UsageRecord]]" = await asyncio.gather(*tasks)

        entries = [record for batch in results for record in batch]
        entries.sort(key=timestamp_sort_key)

        duration = time.monotonic() - started
        self._metrics.observe_load(duration, len(entries))
        logger.info(
            "load_complete",
            records=len(entries),
            unique_hashes=len(store),
            duration_seconds=round(duration, 4),
        )
        return Snapshot(entries, self._calculator, self._now)

    def _load_base_dir(
        self,
        base_dir: "Path",
        store: "DeduplicationStore",
    ) -> "list[UsageRecord]":
        label = str(base_dir)
        kept: "list[UsageRecord]" = []

        for usage_file in discover_usage_files(base_dir):
            records = self._read_file(usage_file, label)
            if not records:
                continue

            if self._filter is not None:
                before = len(records)
                records = [r for r in records if self._filter.keep(r)]
                self._metrics.inc_records_filtered(label, before - len(records))

            new_records = store.filter_new(records)
            self._metrics.inc_duplicates(label, len(records) - len(new_records))
            kept.extend(new_records)

        logger.debug("base_dir_loaded", base_dir=label, records=len(kept))
        return kept

    def _read_file(self, usage_file: "UsageFile", label: "str") -> "list[UsageRecord]":
        try:
            text = usage_file.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            # files can vanish or be mid-write; skip this one only
            logger.warning(
                "usage_file_read_failed",
                path=str(usage_file.path),
                error=str(e),
            )
            self._metrics.inc_file_error(label)
            return []

        self._metrics.inc_files_read(label)
        records, dropped = parse_lines(text, usage_file.session_id)
        if dropped:
            logger.debug(
                "usage_lines_dropped",
                path=str(usage_file.path),
                count=dropped,
            )
            self._metrics.inc_lines_dropped(label, dropped)
        return records
