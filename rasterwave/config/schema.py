from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from rasterwave.components import units
from rasterwave.components.scan import ScanPattern


SCAN_CONFIG_SCHEMA_VERSION = 1    # Schema version for scan config files


class ScanSettings(BaseModel):
    """Raster scan geometry and timing (`[scan]` table)"""
    origin: tuple[float, float] = Field(
        default     = (0.0, 0.0),
        description = "Start coordinates (x0, y0) of the field of view"
    )
    size: tuple[float, float] = Field(
        ...,
        description = "Extent (width, height) of the field of view"
    )
    pixels_per_row: Optional[int] = Field(
        default     = None,
        ge          = 1,
        description = "Number of pixels per row (mutually exclusive with `step`)"
    )
    step: Optional[float] = Field(
        default     = None,
        gt          = 0,
        description = "Distance between pixel centers (mutually exclusive with `pixels_per_row`)"
    )
    dwell_time: str = Field(
        ...,
        description = "Time spent per pixel, e.g. '10 μs' or '1 ms'"
    )
    pattern: str = Field(
        default     = "ramp",
        description = "Per-pixel drive shape: 'step', 'ramp' or 'diagonal'"
    )
    multi_directional: bool = Field(
        default     = True,
        description = "Traverse odd rows right-to-left (serpentine scan)"
    )

    @field_validator("size")
    @classmethod
    def _validate_size(cls, v):
        if v[0] <= 0 or v[1] <= 0:
            raise ValueError(f"Width and height must be positive, got {v}")
        return v

    @field_validator("dwell_time")
    @classmethod
    def _validate_dwell_time(cls, v):
        if units.Time(v) <= 0:
            raise ValueError(f"Dwell time must be positive, got {v}")
        return v

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, v):
        return ScanPattern.parse(v).name.lower()

    @model_validator(mode="after")
    def _validate_resolution(self):
        if (self.pixels_per_row is None) == (self.step is None):
            raise ValueError("Specify exactly one of `pixels_per_row` or `step`")
        return self


class OutputSettings(BaseModel):
    """Analog output policy (`[output]` table)"""
    sample_rate: str = Field(
        ...,
        description = "Analog output sample rate, e.g. '100 kS/s'"
    )
    max_buffer_size: int = Field(
        default     = 65536,
        ge          = 1,
        description = "Maximum samples per channel per chunk"
    )
    voltage_limits: Optional[str] = Field(
        default     = None,
        description = "Allowed output range, e.g. '±10 V'"
    )

    @field_validator("sample_rate")
    @classmethod
    def _validate_sample_rate(cls, v):
        if units.SampleRate(v) <= 0:
            raise ValueError(f"Sample rate must be positive, got {v}")
        return v

    @field_validator("voltage_limits")
    @classmethod
    def _validate_voltage_limits(cls, v):
        if v is not None:
            units.VoltageRange(v)
        return v


class ScanConfig(BaseModel):
    """Complete scan configuration"""
    schema_version: int = Field(
        default     = SCAN_CONFIG_SCHEMA_VERSION,
        ge          = 1,
        description = "Schema version for scan configuration files"
    )
    scan: ScanSettings
    output: OutputSettings

    @property
    def sample_rate(self) -> units.SampleRate:
        return units.SampleRate(self.output.sample_rate)

    @property
    def voltage_limits(self) -> units.VoltageRange | None:
        if self.output.voltage_limits is None:
            return None
        return units.VoltageRange(self.output.voltage_limits)
