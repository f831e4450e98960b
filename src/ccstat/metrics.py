from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

from ccstat.blocks import ActiveBlock
from ccstat.rates import BurnRate


class LoaderMetrics:
    """
    LoaderMetrics records what a load did (files read, lines dropped,
    duplicates removed) and the figures derived from the resulting
    snapshot, on Prometheus instruments.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._registry: "CollectorRegistry" = registry
        self._files_read: "Counter" = Counter(
            "ccstat_files_read_total",
            "Usage log files read",
            ["base_dir"],
            registry=registry,
        )
        self._file_errors: "Counter" = Counter(
            "ccstat_file_read_errors_total",
            "Usage log files that could not be read",
            ["base_dir"],
            registry=registry,
        )
        self._lines_dropped: "Counter" = Counter(
            "ccstat_lines_dropped_total",
            "JSONL lines dropped because they did not parse",
            ["base_dir"],
            registry=registry,
        )
        self._records_filtered: "Counter" = Counter(
            "ccstat_records_filtered_total",
            "Records skipped by the recency filter",
            ["base_dir"],
            registry=registry,
        )
        self._duplicates: "Counter" = Counter(
            "ccstat_duplicates_removed_total",
            "Records dropped as re-deliveries of an already seen record",
            ["base_dir"],
            registry=registry,
        )
        self._records_loaded: "Gauge" = Gauge(
            "ccstat_records_loaded",
            "Records in the merged snapshot",
            registry=registry,
        )
        self._load_duration: "Histogram" = Histogram(
            "ccstat_load_duration_seconds",
            "Duration of a full load across all data directories",
            registry=registry,
        )
        self._today_cost: "Gauge" = Gauge(
            "ccstat_today_cost_usd",
            "Cost of today's usage in USD",
            registry=registry,
        )
        self._session_cost: "Gauge" = Gauge(
            "ccstat_session_cost_usd",
            "Cost of a session's usage in USD",
            ["session_id"],
            registry=registry,
        )
        self._active_block_cost: "Gauge" = Gauge(
            "ccstat_active_block_cost_usd",
            "Cost of the active session block in USD, 0 when none is active",
            registry=registry,
        )
        self._burn_rate: "Gauge" = Gauge(
            "ccstat_active_block_burn_rate_usd_per_hour",
            "Burn rate of the active session block, 0 when undefined",
            registry=registry,
        )

    @property
    def registry(self) -> "CollectorRegistry":
        return self._registry

    def inc_files_read(self, base_dir: "str") -> "None":
        self._files_read.labels(base_dir=base_dir).inc()

    def inc_file_error(self, base_dir: "str") -> "None":
        self._file_errors.labels(base_dir=base_dir).inc()

    def inc_lines_dropped(self, base_dir: "str", count: "int") -> "None":
        if count:
            self._lines_dropped.labels(base_dir=base_dir).inc(count)

    def inc_records_filtered(self, base_dir: "str", count: "int") -> "None":
        if count:
            self._records_filtered.labels(base_dir=base_dir).inc(count)

    def inc_duplicates(self, base_dir: "str", count: "int") -> "None":
        if count:
            self._duplicates.labels(base_dir=base_dir).inc(count)

    def observe_load(self, duration_seconds: "float", record_count: "int") -> "None":
        self._load_duration.observe(duration_seconds)
        self._records_loaded.set(record_count)

    def set_today_cost(self, amount_usd: "float") -> "None":
        self._today_cost.set(amount_usd)

    def set_session_cost(self, session_id: "str", amount_usd: "float") -> "None":
        self._session_cost.labels(session_id=session_id).set(amount_usd)

    def set_active_block(self, block: "ActiveBlock | None") -> "None":
        if block is None:
            self._active_block_cost.set(0)
            self._burn_rate.set(0)
            return

        self._active_block_cost.set(block.cost_usd)
        burn_rate = BurnRate.from_block(block)
        self._burn_rate.set(burn_rate.cost_per_hour if burn_rate else 0)

    def write_textfile(self, path: "str") -> "None":
        """
        writes the registry in the text exposition format, for a
        node exporter textfile collector.
        """
        write_to_textfile(path, self._registry)
