import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

import structlog
from prometheus_client import CollectorRegistry

from ccstat.blocks import format_timestamp
from ccstat.cli import parse_args
from ccstat.config import Config
from ccstat.cost import CostCalculator
from ccstat.errors import CcstatError, DataDirectoryNotFoundError
from ccstat.ids import SessionId
from ccstat.loader import RecencyFilter, UsageLoader
from ccstat.logging import setup_logging
from ccstat.metrics import LoaderMetrics
from ccstat.pricing import default_pricing_table
from ccstat.rates import BurnRate, RemainingTime
from ccstat.snapshot import Snapshot

logger = structlog.get_logger()


def summarize(snapshot: "Snapshot", session_id: "SessionId | None") -> "dict[str, Any]":
    """
    collects the figures a status display needs from a snapshot.
    """
    summary: "dict[str, Any]" = {
        "records": len(snapshot),
        "today_cost_usd": snapshot.today_cost(),
        "session_cost_usd": None,
        "active_block": None,
    }
    if session_id is not None:
        summary["session_cost_usd"] = snapshot.session_cost(session_id)

    block = snapshot.active_block()
    if block is not None:
        burn_rate = BurnRate.from_block(block)
        remaining = RemainingTime.from_block(block, snapshot.now)
        summary["active_block"] = {
            "start_time": format_timestamp(block.start_time),
            "end_time": format_timestamp(block.end_time),
            "cost_usd": block.cost_usd,
            "entries": len(block.entries),
            "burn_rate_per_hour": burn_rate.cost_per_hour if burn_rate else None,
            "remaining_minutes": remaining.minutes,
            "expired": remaining.expired,
        }
    return summary


async def run(config: "Config", metrics: "LoaderMetrics") -> "dict[str, Any]":
    data_dirs = config.existing_data_dirs()
    if not data_dirs:
        raise DataDirectoryNotFoundError(config.data_dirs)

    now = datetime.now(timezone.utc)
    session_id = SessionId(config.session_id) if config.session_id else None
    record_filter = None
    if not config.full_history:
        record_filter = RecencyFilter.for_now(now, current_session=session_id)

    calculator = CostCalculator(default_pricing_table())
    loader = UsageLoader(calculator, metrics, record_filter=record_filter, now=now)
    snapshot = await loader.load(data_dirs)

    summary = summarize(snapshot, session_id)
    metrics.set_today_cost(summary["today_cost_usd"])
    if session_id is not None:
        metrics.set_session_cost(str(session_id), summary["session_cost_usd"])
    metrics.set_active_block(snapshot.active_block())
    return summary


def main(argv: "list[str] | None" = None) -> "None":
    config = parse_args(argv)
    setup_logging(config.log_level)

    metrics = LoaderMetrics(registry=CollectorRegistry())
    try:
        summary = asyncio.run(run(config, metrics))
    except CcstatError as e:
        raise SystemExit(str(e)) from e

    json.dump(summary, sys.stdout)
    sys.stdout.write("\n")

    if config.metrics_textfile:
        metrics.write_textfile(config.metrics_textfile)
        logger.info("metrics_written", path=config.metrics_textfile)


if __name__ == "__main__":
    main()
