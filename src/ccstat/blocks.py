from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from ccstat.cost import CostCalculator
from ccstat.models import UsageRecord

# length of one billing window
SESSION_BLOCK_DURATION = timedelta(hours=5)


def parse_timestamp(text: "str | None") -> "datetime | None":
    """
    parses an ISO-8601 timestamp to an aware UTC datetime. Naive
    values are taken as UTC. Returns None when the text is missing or
    not a timestamp.
    """
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None

    return as_utc(dt)


def as_utc(dt: "datetime") -> "datetime":
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: "datetime") -> "str":
    """
    renders a datetime the way usage logs write timestamps: UTC,
    millisecond precision, Z suffix.
    """
    dt = as_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def floor_to_hour(dt: "datetime") -> "datetime":
    return dt.replace(minute=0, second=0, microsecond=0)


@dataclass(frozen=True, slots=True)
class IdleBlock:
    """
    a period without activity between two session blocks.
    """

    start_time: "datetime"
    end_time: "datetime"

    @property
    def entries(self) -> "tuple[UsageRecord, ...]":
        return ()

    @property
    def cost_usd(self) -> "float":
        return 0.0


@dataclass(frozen=True, slots=True)
class _UsageBlock:
    # floored to the hour of the first entry
    start_time: "datetime"
    entries: "tuple[UsageRecord, ...]"
    cost_usd: "float"
    block_duration: "timedelta" = SESSION_BLOCK_DURATION

    @property
    def end_time(self) -> "datetime":
        return self.start_time + self.block_duration


@dataclass(frozen=True, slots=True)
class ActiveBlock(_UsageBlock):
    """
    the block whose window has not elapsed yet and whose latest
    entry is recent.
    """


@dataclass(frozen=True, slots=True)
class CompletedBlock(_UsageBlock):
    """
    a block whose window has elapsed or gone stale.
    """


SessionBlock = IdleBlock | ActiveBlock | CompletedBlock


class SessionBlockBuilder:
    """
    SessionBlockBuilder groups timestamp-sorted usage records into
    fixed-length billing windows.

    A window opens at the hour of its first entry. It closes when an
    entry arrives more than one block duration after the window start
    or after the previous entry. A gap longer than the block duration
    since the previous entry is also recorded as an IdleBlock spanning
    [previous entry + duration, next entry).

    Each closed window becomes an ActiveBlock when "now" is before its
    end and its last entry is less than one block duration old, and a
    CompletedBlock otherwise.
    """

    def __init__(
        self,
        calculator: "CostCalculator",
        now: "datetime",
        block_duration: "timedelta" = SESSION_BLOCK_DURATION,
    ) -> "None":
        if block_duration <= timedelta(0):
            raise ValueError("block_duration must be positive")
        self._calculator = calculator
        self._now = as_utc(now)
        self._duration = block_duration

    def build(self, records: "Iterable[UsageRecord]") -> "list[SessionBlock]":
        blocks: "list[SessionBlock]" = []
        block_start: "datetime | None" = None
        block_entries: "list[UsageRecord]" = []
        last_entry_time: "datetime | None" = None

        for record in records:
            entry_time = parse_timestamp(record.timestamp)
            if entry_time is None:
                continue

            if block_start is None or last_entry_time is None:
                block_start = floor_to_hour(entry_time)
                block_entries = [record]
                last_entry_time = entry_time
                continue

            since_block_start = entry_time - block_start
            since_last_entry = entry_time - last_entry_time

            # a gap of exactly one block duration keeps the window open
            if since_block_start > self._duration or since_last_entry > self._duration:
                blocks.append(self._close(block_start, block_entries, last_entry_time))

                if since_last_entry > self._duration:
                    blocks.append(
                        IdleBlock(
                            start_time=last_entry_time + self._duration,
                            end_time=entry_time,
                        )
                    )

                block_start = floor_to_hour(entry_time)
                block_entries = [record]
            else:
                block_entries.append(record)

            last_entry_time = entry_time

        if block_start is not None and last_entry_time is not None:
            blocks.append(self._close(block_start, block_entries, last_entry_time))

        return blocks

    def _close(
        self,
        start_time: "datetime",
        entries: "Sequence[UsageRecord]",
        last_entry_time: "datetime",
    ) -> "ActiveBlock | CompletedBlock":
        end_time = start_time + self._duration
        is_active = (
            self._now < end_time and self._now - last_entry_time < self._duration
        )
        block_type = ActiveBlock if is_active else CompletedBlock
        return block_type(
            start_time=start_time,
            entries=tuple(entries),
            cost_usd=self._calculator.total(entries),
            block_duration=self._duration,
        )


def find_active_block(blocks: "Iterable[SessionBlock]") -> "ActiveBlock | None":
    for block in blocks:
        if isinstance(block, ActiveBlock):
            return block
    return None
