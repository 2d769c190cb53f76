#!/usr/bin/env python3
"""
Tests for configuration defaults, YAML loading and logging setup.
"""
import logging
from pathlib import Path

import pytest
import yaml

from sources.modules.sensor_kinematics.sources.config import (
    DEFAULT_CORE_CONFIG, CoreConfig, ensure_output_dir, load_config
)
from sources.modules.sensor_kinematics.sources.errors import ConfigError
from sources.modules.sensor_kinematics.sources.log_setup import PACKAGE_LOGGER, setup_logging


def write_yaml(tmp_path: Path, content: dict) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(content))
    return path


class TestDefaults:
    def test_default_values(self):
        config = DEFAULT_CORE_CONFIG
        assert config.series.capacity == 5
        assert config.series.lowpass_alpha == 0.2738
        assert config.sampling.sampling_period_us == 20_000
        assert config.sampling.min_interval_ns == 20_000_000

    def test_ensure_output_dir(self, tmp_path):
        from dataclasses import replace
        config = replace(DEFAULT_CORE_CONFIG, replay=replace(DEFAULT_CORE_CONFIG.replay, output_dir=tmp_path / "out"))
        assert ensure_output_dir(config).is_dir()


class TestLoadConfig:
    def test_overrides_and_defaults(self, tmp_path):
        path = write_yaml(tmp_path, {
            "series": {"capacity": 8},
            "sampling": {"sampling_period_us": 10000},
            "replay": {"tick_hz": 30, "output_dir": str(tmp_path / "out")},
        })
        config = load_config(path)

        assert isinstance(config, CoreConfig)
        assert config.series.capacity == 8
        assert config.series.lowpass_alpha == DEFAULT_CORE_CONFIG.series.lowpass_alpha
        assert config.sampling.min_interval_ns == 10_000_000
        assert config.replay.tick_hz == 30.0
        assert config.replay.output_dir == tmp_path / "out"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULT_CORE_CONFIG

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        path = write_yaml(tmp_path, {"series": {"capacity": 3, "window": 9}, "fusion": {"kalman": True}})
        with caplog.at_level(logging.WARNING):
            config = load_config(path)
        assert config.series.capacity == 3
        assert "series.window" in caplog.text
        assert "fusion" in caplog.text

    @pytest.mark.parametrize(
        "content",
        [
            {"series": {"capacity": 0}},
            {"series": {"lowpass_alpha": 1.5}},
            {"sampling": {"sampling_period_us": -1}},
            {"replay": {"tick_hz": 0}},
            {"series": {"capacity": "many"}},
            {"series": [1, 2, 3]},
            {"sampling": {"sampling_period_us": 20000.5}},
            {"series": {"capacity": True}},
        ],
    )
    def test_invalid_values(self, tmp_path, content):
        with pytest.raises(ConfigError):
            load_config(write_yaml(tmp_path, content))

    def test_whole_float_is_accepted_for_int_settings(self, tmp_path):
        config = load_config(write_yaml(tmp_path, {"sampling": {"sampling_period_us": 20000.0}}))
        assert config.sampling.sampling_period_us == 20000
        assert isinstance(config.sampling.sampling_period_us, int)

    def test_relative_paths_follow_the_config_file(self, tmp_path):
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        path = config_dir / "config.yaml"
        path.write_text(yaml.safe_dump({"replay": {"input_dir": "../txts", "output_dir": "out"}}))

        config = load_config(path)

        assert config.replay.input_dir.resolve() == (tmp_path / "txts").resolve()
        assert config.replay.output_dir.resolve() == (config_dir / "out").resolve()

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "nope.yaml")


class TestLogging:
    def test_file_and_console_handlers(self, tmp_path):
        logger, log_file = setup_logging(log_dir=tmp_path / "logs")
        try:
            assert logger.name == PACKAGE_LOGGER
            assert log_file.exists()
            assert len(logger.handlers) == 2

            logger, _ = setup_logging(log_dir=tmp_path / "logs")
            assert len(logger.handlers) == 2
        finally:
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
                handler.close()

    def test_console_only(self):
        logger, log_file = setup_logging()
        try:
            assert log_file is None
            assert len(logger.handlers) == 1
        finally:
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
