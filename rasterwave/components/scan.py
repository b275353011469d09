import math
from enum import IntEnum
from typing import TYPE_CHECKING

from rasterwave.components import units

if TYPE_CHECKING:
    from rasterwave.config.schema import ScanSettings


class ScanPattern(IntEnum):
    """
    Shape of the drive signal within a single pixel.

    The integer values are passed to the compiled synthesis kernel, see
    `rasterwave.components.generator`.
    """
    STEP = 0        # constant output for the whole dwell
    RAMP = 1        # horizontal ramp across the pixel, vertically centered
    DIAGONAL = 2    # ramp along both axes across the pixel

    @classmethod
    def parse(cls, pattern: "ScanPattern | str | int") -> "ScanPattern":
        """Returns a ScanPattern from an enum member, its name or its value."""
        if isinstance(pattern, ScanPattern):
            return pattern
        if isinstance(pattern, str):
            try:
                return cls[pattern.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Invalid scan pattern '{pattern}'. Valid options: "
                    f"{', '.join(p.name.lower() for p in cls)}"
                ) from None
        return cls(pattern)


class ScanDescriptor:
    """
    Geometry and timing of a rectangular raster scan.

    The field of view starts at `origin` and extends by `size`. Adjacent pixel
    centers are separated by `step` in both axes. Either `pixels_per_row` or
    `step` must be given (not both); with `pixels_per_row` the step is
    `width / pixels_per_row`.

    `size` and `step` are fixed at construction. `origin`, `dwell_time`,
    `pattern` and `multi_directional` may be changed afterwards and take effect
    on the next generation call.
    """
    def __init__(self,
                 origin: tuple[float, float],
                 size: tuple[float, float],
                 dwell_time: units.Time | str | float,
                 pixels_per_row: int | None = None,
                 step: float | None = None,
                 pattern: ScanPattern | str = ScanPattern.RAMP,
                 multi_directional: bool = True):

        width, height = (float(s) for s in size)
        if width <= 0 or height <= 0:
            raise ValueError(f"Scan size must be positive, got {size}")
        self._size = (width, height)

        if (pixels_per_row is None) == (step is None):
            raise ValueError("Specify exactly one of `pixels_per_row` or `step`")
        if pixels_per_row is not None:
            if (not isinstance(pixels_per_row, int)) or pixels_per_row < 1:
                raise ValueError("`pixels_per_row` must be a positive integer")
            step = width / pixels_per_row
        elif float(step) <= 0:
            raise ValueError(f"Step must be positive, got {step}")
        self._step = float(step)

        self.origin = origin
        self.dwell_time = dwell_time
        self.pattern = pattern
        self.multi_directional = multi_directional

    @classmethod
    def from_config(cls, settings: "ScanSettings") -> "ScanDescriptor":
        """Build a descriptor from a validated `[scan]` configuration section."""
        return cls(
            origin              = settings.origin,
            size                = settings.size,
            dwell_time          = settings.dwell_time,
            pixels_per_row      = settings.pixels_per_row,
            step                = settings.step,
            pattern             = settings.pattern,
            multi_directional   = settings.multi_directional,
        )

    # --- adjustable parameters ---
    @property
    def origin(self) -> tuple[float, float]:
        """Real-world coordinates (x0, y0) of the first pixel."""
        return self._origin

    @origin.setter
    def origin(self, new_origin: tuple[float, float]):
        x0, y0 = new_origin
        self._origin = (float(x0), float(y0))

    @property
    def dwell_time(self) -> units.Time:
        """
        Time spent at each pixel.

        May be set with a Time object, a string with units (e.g. "10 μs") or a
        plain number of milliseconds.
        """
        return self._dwell_time

    @dwell_time.setter
    def dwell_time(self, new_dwell_time: units.Time | str | float):
        if isinstance(new_dwell_time, (int, float)) \
                and not isinstance(new_dwell_time, (bool, units.UnitQuantity)):
            new_dwell_time = units.Time("1 ms") * float(new_dwell_time)
        dwell_time = units.Time(new_dwell_time)
        if dwell_time <= 0:
            raise ValueError(f"Dwell time must be positive, got {dwell_time}")
        self._dwell_time = dwell_time

    @property
    def pattern(self) -> ScanPattern:
        return self._pattern

    @pattern.setter
    def pattern(self, new_pattern: ScanPattern | str):
        self._pattern = ScanPattern.parse(new_pattern)

    @property
    def multi_directional(self) -> bool:
        """If True, odd rows are traversed right-to-left (serpentine)."""
        return self._multi_directional

    @multi_directional.setter
    def multi_directional(self, enabled: bool):
        self._multi_directional = bool(enabled)

    # --- fixed geometry ---
    @property
    def size(self) -> tuple[float, float]:
        """Real-world extent (width, height) of the field of view."""
        return self._size

    @property
    def step(self) -> float:
        """Real-world distance between adjacent pixel centers."""
        return self._step

    @property
    def x_pixels(self) -> int:
        return round(self._size[0] / self._step)

    @property
    def y_pixels(self) -> int:
        return round(self._size[1] / self._step)

    @property
    def grid_extent(self) -> tuple[int, int]:
        """Number of pixels (x, y)."""
        return self.x_pixels, self.y_pixels

    @property
    def total_pixels(self) -> int:
        return self.x_pixels * self.y_pixels

    # --- timing ---
    @property
    def scan_duration(self) -> units.Time:
        """Duration of the full scan, ignoring any output latency."""
        return self.dwell_time * self.total_pixels

    def ticks_per_pixel(self, sample_rate: units.SampleRate | str | float) -> int:
        """Number of output samples emitted per pixel, at least 1."""
        samples = self.dwell_time * units.SampleRate(sample_rate)
        # tolerate float round-off, e.g. 0.001 s * 1000 S/s
        return max(1, math.floor(samples + 1e-9))

    def total_output_samples(self, sample_rate: units.SampleRate | str | float) -> int:
        """Number of samples the full scan produces at `sample_rate`."""
        return round(self.scan_duration * units.SampleRate(sample_rate))

    def __repr__(self) -> str:
        return (
            f"ScanDescriptor(origin={self.origin}, size={self.size}, "
            f"step={self.step}, grid={self.x_pixels}x{self.y_pixels}, "
            f"dwell_time={self.dwell_time}, pattern={self.pattern.name.lower()}, "
            f"multi_directional={self.multi_directional})"
        )
