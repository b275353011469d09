import numpy as np
from numba import njit

from rasterwave.components.scan import ScanDescriptor


@njit(nogil=True, cache=True)
def pixel_coordinate(index: int, x_pixels: int, multi_directional: bool) -> tuple[int, int]:
    """
    Maps a linear (row-major) pixel index to grid coordinates (xi, yi).

    With `multi_directional`, odd rows are reflected so the scan snakes back
    and forth (boustrophedon order).
    """
    xi = index % x_pixels
    yi = index // x_pixels
    if multi_directional and yi % 2 == 1:
        xi = x_pixels - xi - 1
    return xi, yi


class PixelIndexMapper:
    """
    Converts pixel indices of a ScanDescriptor to grid coordinates and
    real-world positions.

    Reads the descriptor's current `origin` and `multi_directional` on every
    call, so changes to the descriptor are picked up immediately.
    """
    def __init__(self, descriptor: ScanDescriptor):
        self._descriptor = descriptor

    def _validate_index(self, index: int) -> int:
        total = self._descriptor.total_pixels
        if not 0 <= index < total:
            raise IndexError(f"Pixel index {index} outside range [0, {total})")
        return int(index)

    def grid_coordinate(self, index: int) -> tuple[int, int]:
        """Returns (xi, yi) for pixel `index`."""
        index = self._validate_index(index)
        d = self._descriptor
        xi, yi = pixel_coordinate(index, d.x_pixels, d.multi_directional)
        return int(xi), int(yi)

    def pixel_position(self, index: int) -> tuple[float, float]:
        """Returns the real-world coordinate (x, y) of pixel `index`."""
        xi, yi = self.grid_coordinate(index)
        x0, y0 = self._descriptor.origin
        step = self._descriptor.step
        return x0 + xi * step, y0 + yi * step

    def traversal_order(self) -> np.ndarray:
        """
        Returns grid coordinates of every pixel in scan order, as an array of
        shape (total_pixels, 2) with columns (xi, yi).
        """
        d = self._descriptor
        if d.total_pixels == 0:
            return np.empty((0, 2), dtype=np.int64)
        index = np.arange(d.total_pixels, dtype=np.int64)
        xi = index % d.x_pixels
        yi = index // d.x_pixels
        if d.multi_directional:
            odd = (yi % 2) == 1
            xi[odd] = d.x_pixels - xi[odd] - 1
        return np.column_stack((xi, yi))
