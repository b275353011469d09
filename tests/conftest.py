import pytest

from rasterwave.components import units
from rasterwave.components.scan import ScanDescriptor, ScanPattern


@pytest.fixture
def square_scan() -> ScanDescriptor:
    """10 x 10 field of view, 5 pixels per row (step 2), 1 ms dwell."""
    return ScanDescriptor(
        origin          = (0.0, 0.0),
        size            = (10.0, 10.0),
        pixels_per_row  = 5,
        dwell_time      = units.Time("1 ms"),
        pattern         = ScanPattern.RAMP,
    )


@pytest.fixture
def serpentine_scan() -> ScanDescriptor:
    """4 x 2 pixel grid with unit step."""
    return ScanDescriptor(
        origin              = (0.0, 0.0),
        size                = (4.0, 2.0),
        step                = 1.0,
        dwell_time          = "1 ms",
        pattern             = ScanPattern.STEP,
        multi_directional   = True,
    )
