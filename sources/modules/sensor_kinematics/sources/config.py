from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from .errors import ConfigError


logger = logging.getLogger(__name__)

MODULE_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = MODULE_ROOT / "data"
INPUT_TXT_DIR = DATA_DIR / "inputs" / "txts"
OUTPUT_DIR = DATA_DIR / "outputs"


@dataclass(frozen=True)
class SeriesParams:
    """History length and smoothing applied to every tracked sensor"""
    capacity: int = 5
    lowpass_alpha: float = 0.2738  # one-pole low-pass, ~3 Hz cutoff at 50 Hz


@dataclass(frozen=True)
class SamplingParams:
    sampling_period_us: int = 1_000_000 // 50  # 50 Hz

    @property
    def min_interval_ns(self) -> int:
        return self.sampling_period_us * 1_000


@dataclass(frozen=True)
class ReplayParams:
    tick_hz: float = 60.0  # host frame rate driving on_tick
    input_dir: Path = INPUT_TXT_DIR
    output_dir: Path = OUTPUT_DIR


@dataclass(frozen=True)
class CoreConfig:
    series: SeriesParams = field(default_factory=SeriesParams)
    sampling: SamplingParams = field(default_factory=SamplingParams)
    replay: ReplayParams = field(default_factory=ReplayParams)


DEFAULT_CORE_CONFIG = CoreConfig()


def ensure_output_dir(config: CoreConfig = DEFAULT_CORE_CONFIG) -> Path:
    output_dir = Path(config.replay.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def validate_config(config: CoreConfig) -> CoreConfig:
    if config.series.capacity < 1:
        raise ConfigError(f"series.capacity must be >= 1, got {config.series.capacity}")
    if not 0.0 < config.series.lowpass_alpha <= 1.0:
        raise ConfigError(f"series.lowpass_alpha must be in (0, 1], got {config.series.lowpass_alpha}")
    if config.sampling.sampling_period_us <= 0:
        raise ConfigError(
            f"sampling.sampling_period_us must be positive, got {config.sampling.sampling_period_us}"
        )
    if config.replay.tick_hz <= 0:
        raise ConfigError(f"replay.tick_hz must be positive, got {config.replay.tick_hz}")
    return config


def _coerce(default_value, value, base_dir: Path):
    if isinstance(default_value, Path):
        path = Path(value).expanduser()
        return path if path.is_absolute() else base_dir / path
    if isinstance(value, bool):
        raise TypeError("booleans are not numeric settings")
    if isinstance(default_value, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    return type(default_value)(value)


def _apply_section(section_name: str, defaults, overrides, base_dir: Path):
    if overrides is None:
        return defaults
    if not isinstance(overrides, dict):
        raise ConfigError(f"Section '{section_name}' must be a mapping")

    known = {f.name: f for f in fields(defaults)}
    values = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown key '{section_name}.{key}'")
            continue
        try:
            values[key] = _coerce(getattr(defaults, key), value, base_dir)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for '{section_name}.{key}': {value!r}") from e
    return replace(defaults, **values)


def load_config(config_path) -> CoreConfig:
    """
    Load a YAML configuration file on top of the defaults.

    Missing sections keep their default values; unknown keys are ignored.
    Relative paths are resolved against the directory of the YAML file.

    Args:
        config_path: Path of the YAML file.

    Returns:
        CoreConfig: Validated configuration.
    """
    try:
        with open(config_path, "r") as file:
            raw = yaml.safe_load(file) or {}

        if not isinstance(raw, dict):
            raise ConfigError(f"Top level of {config_path} must be a mapping")

        for section in raw:
            if section not in ("series", "sampling", "replay"):
                logger.warning(f"Ignoring unknown section '{section}'")

        base_dir = Path(config_path).resolve().parent
        config = CoreConfig(
            series=_apply_section("series", DEFAULT_CORE_CONFIG.series, raw.get("series"), base_dir),
            sampling=_apply_section("sampling", DEFAULT_CORE_CONFIG.sampling, raw.get("sampling"), base_dir),
            replay=_apply_section("replay", DEFAULT_CORE_CONFIG.replay, raw.get("replay"), base_dir),
        )
        validate_config(config)
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise
