import logging
from collections.abc import Iterator

import numpy as np
from numba import njit

from rasterwave.components import units
from rasterwave.components.scan import ScanDescriptor, ScanPattern
from rasterwave.components.mapper import pixel_coordinate


logger = logging.getLogger(__name__)

# Pattern codes, frozen into the compiled kernel
STEP = int(ScanPattern.STEP)
RAMP = int(ScanPattern.RAMP)
DIAGONAL = int(ScanPattern.DIAGONAL)


@njit(nogil=True, cache=True)
def synthesize_kernel(waveform: np.ndarray,
                      start_index: int,
                      x_pixels: int,
                      multi_directional: bool,
                      x0: float,
                      y0: float,
                      step: float,
                      ticks_per_pixel: int,
                      pattern: int):
    """
    Fills `waveform` (shape: 2, Npixels * ticks_per_pixel) with X (row 0) and
    Y (row 1) drive values for consecutive pixels starting at `start_index`.

    Each pixel starts at its real-world coordinate and is subdivided into
    `ticks_per_pixel` output samples:
        STEP:     constant, offset by half a sub-step
        RAMP:     X advances by one sub-step per tick, Y offset by half a sub-step
        DIAGONAL: X and Y both advance by one sub-step per tick
    """
    n_pixels = waveform.shape[1] // ticks_per_pixel
    dur_step = step / ticks_per_pixel
    dur_half_step = dur_step / 2

    for p in range(n_pixels):
        xi, yi = pixel_coordinate(start_index + p, x_pixels, multi_directional)
        x_vol = x0 + xi * step
        y_vol = y0 + yi * step
        offset = p * ticks_per_pixel

        for t in range(ticks_per_pixel):
            if pattern == STEP:
                waveform[0, offset + t] = x_vol + dur_half_step
                waveform[1, offset + t] = y_vol + dur_half_step
            elif pattern == DIAGONAL:
                waveform[0, offset + t] = x_vol
                waveform[1, offset + t] = y_vol
                x_vol += dur_step
                y_vol += dur_step
            else: # RAMP
                waveform[0, offset + t] = x_vol
                waveform[1, offset + t] = y_vol + dur_half_step
                x_vol += dur_step


class ScanCursor:
    """
    Tracks progress through the pixels of one scan.

    `pixel_index` only increases between calls to `reset`. A value equal to
    `total_pixels` means the scan is complete.
    """
    __slots__ = ("_pixel_index", "_total_pixels")

    def __init__(self, total_pixels: int):
        if total_pixels < 0:
            raise ValueError("Total pixel count must be >= 0")
        self._total_pixels = int(total_pixels)
        self._pixel_index = 0

    @property
    def pixel_index(self) -> int:
        """Index of the next pixel to generate."""
        return self._pixel_index

    @property
    def total_pixels(self) -> int:
        return self._total_pixels

    @property
    def remaining(self) -> int:
        return self._total_pixels - self._pixel_index

    @property
    def at_end(self) -> bool:
        return self._pixel_index >= self._total_pixels

    def advance(self, n_pixels: int):
        if n_pixels < 0:
            raise ValueError("Cursor can not move backwards, use reset()")
        self._pixel_index = min(self._pixel_index + n_pixels, self._total_pixels)

    def reset(self):
        self._pixel_index = 0

    def __repr__(self) -> str:
        return f"ScanCursor({self._pixel_index}/{self._total_pixels})"


class RasterWaveformGenerator:
    """
    Produces a raster scan's X/Y drive waveform in chunks.

    Each call to `next_chunk` picks up where the previous one stopped, so an
    output buffer can be refilled without computing the whole scan at once.
    Not thread-safe: a generator (and its cursor) must be used by one thread.
    """
    def __init__(self, descriptor: ScanDescriptor, cursor: ScanCursor | None = None):
        self._descriptor = descriptor
        if cursor is None:
            cursor = ScanCursor(descriptor.total_pixels)
        elif cursor.total_pixels != descriptor.total_pixels:
            raise ValueError(
                f"Cursor covers {cursor.total_pixels} pixels, descriptor has "
                f"{descriptor.total_pixels}"
            )
        self._cursor = cursor

    @property
    def descriptor(self) -> ScanDescriptor:
        return self._descriptor

    @property
    def cursor(self) -> ScanCursor:
        return self._cursor

    @property
    def at_end(self) -> bool:
        """True once every pixel of the scan has been generated."""
        return self._cursor.at_end

    def reset(self):
        """Rewinds to the first pixel for a new sweep over the same geometry."""
        self._cursor.reset()
        logger.debug("Scan cursor reset")

    def total_output_samples(self, sample_rate: units.SampleRate | str | float) -> int:
        return self._descriptor.total_output_samples(sample_rate)

    def next_chunk(self,
                   sample_rate: units.SampleRate | str | float,
                   max_buffer_size: int) -> np.ndarray | None:
        """
        Generates the next chunk of the scan waveform.

        Args:
            sample_rate: Analog output sample rate.
            max_buffer_size: Maximum number of samples (per channel) the
                output buffer can hold. Only whole pixels are generated.

        Returns:
            Array of shape (2, N * ticks_per_pixel), rows X and Y, or None if
            no whole pixel can be generated: the scan is complete, or the
            sample rate or buffer size leaves no room for a pixel.

        Raises:
            TypeError: If `max_buffer_size` is not an integer.
        """
        if isinstance(max_buffer_size, bool) or not isinstance(max_buffer_size, (int, np.integer)):
            raise TypeError(
                f"Max buffer size must be an integer, got {type(max_buffer_size).__name__}"
            )
        sample_rate = units.SampleRate(sample_rate)
        if self._cursor.at_end:
            return None
        if sample_rate <= 0 or max_buffer_size < 1:
            logger.warning(
                "No samples generated: sample rate %s, max buffer size %d",
                sample_rate, max_buffer_size
            )
            return None

        d = self._descriptor
        ticks_per_pixel = d.ticks_per_pixel(sample_rate)
        n_pixels = min(self._cursor.remaining, int(max_buffer_size) // ticks_per_pixel)
        if n_pixels <= 0:
            logger.debug(
                "Max buffer size (%d) is smaller than one pixel (%d samples)",
                max_buffer_size, ticks_per_pixel
            )
            return None

        start_index = self._cursor.pixel_index
        waveform = np.empty((2, n_pixels * ticks_per_pixel), dtype=np.float64)
        x0, y0 = d.origin
        synthesize_kernel(
            waveform,
            start_index,
            d.x_pixels,
            d.multi_directional,
            x0,
            y0,
            d.step,
            ticks_per_pixel,
            int(d.pattern)
        )
        self._cursor.advance(n_pixels)

        logger.debug(
            "Generated pixels %d-%d (%d samples/pixel)",
            start_index, start_index + n_pixels - 1, ticks_per_pixel
        )
        if self._cursor.at_end:
            logger.info("Scan complete: %d pixels", self._cursor.total_pixels)
        return waveform

    def chunks(self,
               sample_rate: units.SampleRate | str | float,
               max_buffer_size: int) -> Iterator[np.ndarray]:
        """Yields chunks from the current position until the scan is complete."""
        while True:
            chunk = self.next_chunk(sample_rate, max_buffer_size)
            if chunk is None:
                return
            yield chunk
