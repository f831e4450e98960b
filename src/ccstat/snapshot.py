from bisect import bisect_left
from datetime import datetime, time, timezone
from functools import cached_property
from typing import Sequence

from ccstat.blocks import (
    ActiveBlock,
    SessionBlock,
    SessionBlockBuilder,
    as_utc,
    find_active_block,
    format_timestamp,
)
from ccstat.cost import CostCalculator
from ccstat.ids import SessionId
from ccstat.models import UsageRecord


def timestamp_sort_key(record: "UsageRecord") -> "str":
    # records without a timestamp sort first
    return record.timestamp or ""


def local_midnight(now: "datetime") -> "datetime":
    """
    returns local midnight of the day containing "now", in UTC.
    """
    local_now = as_utc(now).astimezone()
    # naive astimezone() resolves the local offset in effect at midnight
    return as_utc(datetime.combine(local_now.date(), time(0)).astimezone())


class Snapshot:
    """
    Snapshot is the merged, deduplicated and timestamp-sorted set of
    usage records of one load.

    It is built fresh on every invocation and never mutated. Derived
    views are computed on first access and cached for the lifetime of
    the snapshot, all of them evaluated at the same instant "now".
    """

    def __init__(
        self,
        entries: "Sequence[UsageRecord]",
        calculator: "CostCalculator",
        now: "datetime | None" = None,
    ) -> "None":
        self._entries: "tuple[UsageRecord, ...]" = tuple(entries)
        self._calculator = calculator
        self._now = as_utc(now) if now is not None else datetime.now(timezone.utc)
        self._session_costs: "dict[SessionId, float]" = {}

    def __len__(self) -> "int":
        return len(self._entries)

    @property
    def entries(self) -> "tuple[UsageRecord, ...]":
        return self._entries

    @property
    def now(self) -> "datetime":
        return self._now

    @cached_property
    def today_start(self) -> "str":
        return format_timestamp(local_midnight(self._now))

    def today_entries(self) -> "tuple[UsageRecord, ...]":
        """
        entries at or after local midnight. A binary search over the
        timestamp strings, valid because the logs use fixed-width,
        zero-padded UTC ISO-8601 timestamps which sort chronologically.
        """
        start = bisect_left(self._entries, self.today_start, key=timestamp_sort_key)
        return self._entries[start:]

    @cached_property
    def _today_cost(self) -> "float":
        return self._calculator.total(self.today_entries())

    def today_cost(self) -> "float":
        return self._today_cost

    def session_cost(self, session_id: "SessionId") -> "float":
        if session_id not in self._session_costs:
            self._session_costs[session_id] = self._calculator.total(
                e for e in self._entries if e.session_id == session_id
            )
        return self._session_costs[session_id]

    @cached_property
    def _blocks(self) -> "tuple[SessionBlock, ...]":
        builder = SessionBlockBuilder(self._calculator, self._now)
        return tuple(builder.build(self._entries))

    def blocks(self) -> "tuple[SessionBlock, ...]":
        return self._blocks

    def active_block(self) -> "ActiveBlock | None":
        return find_active_block(self._blocks)
