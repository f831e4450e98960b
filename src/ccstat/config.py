import os
from dataclasses import dataclass, field
from pathlib import Path

# comma separated list of data directories, replaces the defaults
CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"


def default_data_dirs(home: "Path | None" = None) -> "list[Path]":
    home = home if home is not None else Path.home()
    return [home / ".config" / "claude", home / ".claude"]


@dataclass
class Config:
    # candidate data directories, each holding a projects/ tree
    data_dirs: "list[Path]" = field(default_factory=default_data_dirs)
    # session whose cost is reported; empty for none
    session_id: "str" = ""
    # load every record instead of only the recent ones
    full_history: "bool" = False
    # write metrics in the Prometheus text format to this path
    metrics_textfile: "str" = ""
    log_level: "str" = "warning"

    @classmethod
    def from_env(cls) -> "Config":
        raw = os.environ.get(CONFIG_DIR_ENV, "")
        dirs = [Path(p.strip()).expanduser() for p in raw.split(",") if p.strip()]
        if dirs:
            return cls(data_dirs=dirs)
        return cls()

    def existing_data_dirs(self) -> "list[Path]":
        """
        returns the candidate data directories that exist, without
        duplicates, in candidate order.
        """
        found: "list[Path]" = []
        for d in self.data_dirs:
            if d.is_dir() and d not in found:
                found.append(d)
        return found
