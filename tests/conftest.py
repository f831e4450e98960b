import json
from pathlib import Path
from typing import Any, Callable

import pytest
from prometheus_client import CollectorRegistry

from ccstat.cost import CostCalculator
from ccstat.pricing import default_pricing_table


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


@pytest.fixture()
def calculator() -> "CostCalculator":
    return CostCalculator(default_pricing_table())


@pytest.fixture()
def write_log() -> "Callable[..., Path]":
    """
    writes usage records as a JSONL file at
    <base>/projects/<project>/<session>.jsonl. Strings are written
    verbatim, anything else is JSON encoded.
    """

    def _write(
        base: "Path",
        project: "str",
        session: "str",
        lines: "list[dict[str, Any] | str]",
    ) -> "Path":
        path = base / "projects" / project / f"{session}.jsonl"
        path.parent.mkdir(parents=True, exist_ok=True)
        text = "\n".join(
            line if isinstance(line, str) else json.dumps(line) for line in lines
        )
        path.write_text(text + "\n", encoding="utf-8")
        return path

    return _write
