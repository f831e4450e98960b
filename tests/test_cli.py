from pathlib import Path

import pytest

from ccstat.cli import parse_args


class TestParseArgs:
    def test_defaults(self, monkeypatch: "object", tmp_path: "Path") -> "None":
        monkeypatch.delenv("CLAUDE_CONFIG_DIR", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        config = parse_args([])
        assert config.session_id == ""
        assert config.full_history is False
        assert config.metrics_textfile == ""
        assert config.log_level == "warning"
        assert config.data_dirs == [tmp_path / ".config" / "claude", tmp_path / ".claude"]

    def test_flags(self, monkeypatch: "object") -> "None":
        monkeypatch.setenv("CLAUDE_CONFIG_DIR", "/from/env")
        config = parse_args(
            [
                "--session.id",
                "sess-1",
                "--data.dir",
                "/a",
                "--data.dir",
                "/b",
                "--load.full-history",
                "--metrics.textfile",
                "/tmp/ccstat.prom",
                "--log.level",
                "debug",
            ]
        )
        assert config.session_id == "sess-1"
        assert config.data_dirs == [Path("/a"), Path("/b")]
        assert config.full_history is True
        assert config.metrics_textfile == "/tmp/ccstat.prom"
        assert config.log_level == "debug"

    def test_env_dirs_used_without_flag(self, monkeypatch: "object") -> "None":
        monkeypatch.setenv("CLAUDE_CONFIG_DIR", "/from/env")
        assert parse_args([]).data_dirs == [Path("/from/env")]

    def test_rejects_unknown_log_level(self) -> "None":
        with pytest.raises(SystemExit):
            parse_args(["--log.level", "verbose"])
