import logging
from pathlib import Path
import tomllib
from typing import Any

import platformdirs as pd
from pydantic import ValidationError

from rasterwave.components.scan import ScanDescriptor
from rasterwave.components.generator import RasterWaveformGenerator
from rasterwave.config.schema import ScanConfig


logger = logging.getLogger(__name__)


class ScanConfigError(ValueError):
    """Raised when a scan configuration file is malformed or inconsistent."""
    def __init__(self, message: str, source: Path | None = None):
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)
        self.source = source


def config_path() -> Path:
    return pd.user_config_path("rasterwave")


def default_scan_config_path() -> Path:
    return config_path() / "scan.toml"


def load_toml(file_name: Path | str) -> dict[str, Any]:
    file_name = Path(file_name)
    if not file_name.exists():
        raise FileNotFoundError(f"Can not find TOML file: {file_name}")
    if file_name.suffix != ".toml":
        raise ValueError(f"Requested to load a non-TOML file: {file_name}")
    with open(file_name, mode="rb") as toml_file:
        try:
            return tomllib.load(toml_file)
        except tomllib.TOMLDecodeError as e:
            raise ScanConfigError(f"Invalid TOML: {e}", file_name) from e


def parse_scan_config(data: dict[str, Any], source: Path | None = None) -> ScanConfig:
    """Validates a scan configuration mapping (e.g. parsed TOML)."""
    try:
        config = ScanConfig.model_validate(data)
    except ValidationError as e:
        raise ScanConfigError(str(e), source) from e
    check_within_limits(config, source)
    return config


def load_scan_config(path: Path | str | None = None) -> ScanConfig:
    """
    Loads and validates a scan configuration TOML file.

    Defaults to `scan.toml` in the user configuration directory.
    """
    path = Path(path) if path is not None else default_scan_config_path()
    config = parse_scan_config(load_toml(path), source=path)
    logger.info("Loaded scan configuration from %s", path)
    return config


def check_within_limits(config: ScanConfig, source: Path | None = None):
    """
    Confirms the whole field of view can be driven within the configured
    output voltage limits. No-op if no limits are configured.
    """
    limits = config.voltage_limits
    if limits is None:
        return
    x0, y0 = config.scan.origin
    width, height = config.scan.size
    for corner in (x0, y0, x0 + width, y0 + height):
        if not limits.within_range(corner):
            raise ScanConfigError(
                f"Field of view ({x0}, {y0}) to ({x0 + width}, {y0 + height}) "
                f"exceeds output voltage limits {limits}",
                source
            )


def generator_from_config(config: ScanConfig | Path | str | None = None) -> RasterWaveformGenerator:
    """Returns a waveform generator for a configuration object or file."""
    if not isinstance(config, ScanConfig):
        config = load_scan_config(config)
    descriptor = ScanDescriptor.from_config(config.scan)
    logger.info("Scan %s", descriptor)
    return RasterWaveformGenerator(descriptor)
