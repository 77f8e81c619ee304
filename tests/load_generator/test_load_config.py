"""Tests for load test config parsing."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from synthetic_workload_service.load_generator.config import (
    LoadTestConfig,
    load_config,
    parse_duration,
)


def test_parse_duration_parses_supported_units() -> None:
    assert parse_duration("30s").total_seconds() == 30
    assert parse_duration("5m").total_seconds() == 300
    assert parse_duration("2h").total_seconds() == 7200


def test_parse_duration_rejects_invalid_unit() -> None:
    with pytest.raises(ValueError):
        parse_duration("10d")


def test_defaults_mirror_reference_ramp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BASE_URL", raising=False)
    config = load_config()
    assert config.base_url == "http://localhost:3000"
    assert config.api_url == "http://localhost:3000/api"
    assert [(stage.duration, stage.target) for stage in config.stages] == [
        ("10s", 5),
        ("30s", 10),
        ("10s", 0),
    ]
    assert config.thresholds.p95_ms == 2000
    assert config.thresholds.max_error_rate == 0.1
    assert config.schedule().total_duration == 50


def test_load_config_reads_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BASE_URL", raising=False)
    config_yaml = tmp_path / "loadtest.yaml"
    config_yaml.write_text(
        """
        base_url: http://service:8080/
        api_prefix: ""
        think_time: 0
        stages:
          - duration: 1m
            target: 3
        thresholds:
          p95_ms: 500
        output_dir: out
        """,
        encoding="utf-8",
    )

    config = load_config(config_yaml)
    assert isinstance(config, LoadTestConfig)
    assert config.api_url == "http://service:8080"
    assert config.schedule().total_duration == 60
    assert config.thresholds.p95_ms == 500
    assert config.thresholds.max_error_rate == 0.1
    assert config.output_dir == Path("out")


def test_base_url_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BASE_URL", "http://from-env:3000")
    config_yaml = tmp_path / "loadtest.yaml"
    config_yaml.write_text("base_url: http://from-file:3000\n", encoding="utf-8")
    assert load_config(config_yaml).base_url == "http://from-env:3000"


def test_load_config_rejects_empty_file(tmp_path: Path) -> None:
    config_yaml = tmp_path / "empty.yaml"
    config_yaml.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_yaml)


def test_config_rejects_bad_stages() -> None:
    with pytest.raises(ValidationError):
        LoadTestConfig.model_validate({"stages": []})
    with pytest.raises(ValidationError):
        LoadTestConfig.model_validate({"stages": [{"duration": "10d", "target": 1}]})
    with pytest.raises(ValidationError):
        LoadTestConfig.model_validate({"cpu_n_min": 30, "cpu_n_max": 10})
