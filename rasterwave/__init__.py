from .components.units import (
    UnitQuantity,
    Voltage, VoltageRange,
    Frequency,
    SampleRate,
    Time,
)
from .components.scan import ScanDescriptor, ScanPattern
from .components.mapper import PixelIndexMapper
from .components.generator import RasterWaveformGenerator, ScanCursor

__all__ = [
    "UnitQuantity",
    "Voltage", "VoltageRange",
    "Frequency",
    "SampleRate",
    "Time",
    "ScanDescriptor", "ScanPattern",
    "PixelIndexMapper",
    "RasterWaveformGenerator", "ScanCursor",
]
