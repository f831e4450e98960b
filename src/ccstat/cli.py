import argparse
from pathlib import Path

from ccstat.config import Config


def parse_args(argv: "list[str] | None" = None) -> "Config":
    parser = argparse.ArgumentParser(
        prog="ccstat",
        description="Cost and session block analytics for coding assistant usage logs",
    )
    parser.add_argument(
        "--session.id",
        dest="session_id",
        default="",
        help="Session whose cost is reported",
    )
    parser.add_argument(
        "--data.dir",
        dest="data_dirs",
        action="append",
        type=Path,
        default=None,
        help="Data directory to scan, may be repeated "
        "(default: $CLAUDE_CONFIG_DIR or ~/.config/claude and ~/.claude)",
    )
    parser.add_argument(
        "--load.full-history",
        dest="full_history",
        action="store_true",
        help="Load all records instead of only the recent ones",
    )
    parser.add_argument(
        "--metrics.textfile",
        dest="metrics_textfile",
        default="",
        help="Write Prometheus metrics to this file",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: warning)",
    )

    args = parser.parse_args(argv)
    config = Config.from_env()
    if args.data_dirs:
        config.data_dirs = [d.expanduser() for d in args.data_dirs]
    config.session_id = args.session_id
    config.full_history = args.full_history
    config.metrics_textfile = args.metrics_textfile
    config.log_level = args.log_level
    return config
