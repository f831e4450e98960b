from dataclasses import dataclass
from datetime import datetime, timedelta

from ccstat.blocks import IdleBlock, SessionBlock, as_utc, parse_timestamp


def _whole_minutes(delta: "timedelta") -> "int":
    # truncates toward zero, like a signed minute count
    return int(delta.total_seconds() / 60)


@dataclass(frozen=True, slots=True)
class BurnRate:
    """
    BurnRate is the spend of a session block per hour, measured over
    the span between its first and last entry (not from the block
    start).
    """

    cost_per_hour: "float"

    @classmethod
    def from_block(cls, block: "SessionBlock") -> "BurnRate | None":
        """
        returns None for idle or empty blocks and when the first and
        last entries are less than a whole minute apart (or inverted).
        """
        if isinstance(block, IdleBlock) or not block.entries:
            return None

        first = parse_timestamp(block.entries[0].timestamp)
        last = parse_timestamp(block.entries[-1].timestamp)
        if first is None or last is None:
            return None

        minutes = _whole_minutes(last - first)
        if minutes <= 0:
            return None

        return cls(cost_per_hour=block.cost_usd / minutes * 60)


@dataclass(frozen=True, slots=True)
class RemainingTime:
    """
    minutes left until a block's window ends, clamped to zero.
    """

    minutes: "int"
    expired: "bool" = False

    @classmethod
    def from_block(cls, block: "SessionBlock", now: "datetime") -> "RemainingTime":
        raw = _whole_minutes(block.end_time - as_utc(now))
        if raw < 0:
            return cls(minutes=0, expired=True)
        return cls(minutes=raw)

    @property
    def has_remaining(self) -> "bool":
        return self.minutes > 0
