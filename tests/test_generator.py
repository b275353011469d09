import numpy as np
import pytest

from rasterwave.components import units
from rasterwave.components.scan import ScanDescriptor, ScanPattern
from rasterwave.components.generator import RasterWaveformGenerator, ScanCursor


SAMPLE_RATE = units.SampleRate("1 kS/s")


def make_scan(pattern: ScanPattern, dwell_time: str = "4 ms", **kwargs) -> ScanDescriptor:
    """3 x 2 pixel grid with unit step; 4 ms dwell -> 4 samples per pixel at 1 kS/s."""
    return ScanDescriptor(
        origin=(0, 0), size=(3, 2), step=1, dwell_time=dwell_time,
        pattern=pattern, **kwargs
    )


def test_end_to_end_example(square_scan):
    gen = RasterWaveformGenerator(square_scan)
    waveform = gen.next_chunk(SAMPLE_RATE, max_buffer_size=1000)

    assert waveform.shape == (2, 25)
    assert waveform.dtype == np.float64
    assert waveform[0, 0] == 0.0
    # ramp is vertically centered within the (single) sub-step
    assert waveform[1, 0] == pytest.approx(1.0)
    assert gen.at_end
    assert gen.next_chunk(SAMPLE_RATE, max_buffer_size=1000) is None


def test_chunks_respect_buffer_size(square_scan):
    gen = RasterWaveformGenerator(square_scan)
    sizes = []
    indices = [gen.cursor.pixel_index]
    while (chunk := gen.next_chunk(SAMPLE_RATE, max_buffer_size=10)) is not None:
        sizes.append(chunk.shape[1])
        indices.append(gen.cursor.pixel_index)

    assert sizes == [10, 10, 5]
    assert indices == sorted(indices)
    assert gen.at_end


def test_only_whole_pixels_are_generated():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    chunk = gen.next_chunk(SAMPLE_RATE, max_buffer_size=10)
    # 4 samples per pixel: 2 pixels fit in 10 samples
    assert chunk.shape == (2, 8)
    assert gen.cursor.pixel_index == 2


def test_chunked_output_matches_single_pass(square_scan):
    whole = RasterWaveformGenerator(square_scan).next_chunk(SAMPLE_RATE, 1000)
    pieces = list(RasterWaveformGenerator(square_scan).chunks(SAMPLE_RATE, 7))
    np.testing.assert_array_equal(np.concatenate(pieces, axis=1), whole)


def test_total_output_samples_matches_generated(square_scan):
    gen = RasterWaveformGenerator(square_scan)
    n = sum(c.shape[1] for c in gen.chunks(SAMPLE_RATE, 8))
    assert n == gen.total_output_samples(SAMPLE_RATE) == 25


def test_step_pattern_constant_within_pixel():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.STEP))
    waveform = gen.next_chunk(SAMPLE_RATE, 1000)
    pixels = waveform.reshape(2, 6, 4)     # channel, pixel, tick

    assert np.all(pixels == pixels[:, :, :1])
    # first pixel: origin + half of a 1/4 sub-step
    np.testing.assert_allclose(pixels[:, 0, 0], [0.125, 0.125])


def test_diagonal_pattern_increments_both_axes():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.DIAGONAL))
    pixels = gen.next_chunk(SAMPLE_RATE, 1000).reshape(2, 6, 4)

    dx = np.diff(pixels[0], axis=1)
    dy = np.diff(pixels[1], axis=1)
    np.testing.assert_allclose(dx, 0.25)
    np.testing.assert_allclose(dy, 0.25)
    np.testing.assert_allclose(pixels[:, 0, 0], [0.0, 0.0])


def test_ramp_pattern_increments_x_only():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    pixels = gen.next_chunk(SAMPLE_RATE, 1000).reshape(2, 6, 4)

    np.testing.assert_allclose(np.diff(pixels[0], axis=1), 0.25)
    np.testing.assert_allclose(np.diff(pixels[1], axis=1), 0.0)
    np.testing.assert_allclose(pixels[:, 1, 0], [1.0, 0.125])


def test_serpentine_rows(serpentine_scan):
    gen = RasterWaveformGenerator(serpentine_scan)
    waveform = gen.next_chunk(SAMPLE_RATE, 1000)

    np.testing.assert_allclose(waveform[0], [0.5, 1.5, 2.5, 3.5, 3.5, 2.5, 1.5, 0.5])
    np.testing.assert_allclose(waveform[1], [0.5] * 4 + [1.5] * 4)


def test_serpentine_continues_across_chunks(serpentine_scan):
    gen = RasterWaveformGenerator(serpentine_scan)
    first = gen.next_chunk(SAMPLE_RATE, 3)
    second = gen.next_chunk(SAMPLE_RATE, 3)
    third = gen.next_chunk(SAMPLE_RATE, 3)

    np.testing.assert_allclose(first[0], [0.5, 1.5, 2.5])
    np.testing.assert_allclose(second[0], [3.5, 3.5, 2.5])
    np.testing.assert_allclose(third[0], [1.5, 0.5])


def test_unidirectional_rows(serpentine_scan):
    serpentine_scan.multi_directional = False
    waveform = RasterWaveformGenerator(serpentine_scan).next_chunk(SAMPLE_RATE, 1000)
    np.testing.assert_allclose(waveform[0], [0.5, 1.5, 2.5, 3.5] * 2)


def test_origin_offsets_waveform(serpentine_scan):
    serpentine_scan.origin = (-2.0, 1.0)
    waveform = RasterWaveformGenerator(serpentine_scan).next_chunk(SAMPLE_RATE, 1000)
    assert waveform[0, 0] == pytest.approx(-1.5)
    assert waveform[1, 0] == pytest.approx(1.5)


def test_pattern_change_applies_to_next_chunk():
    scan = make_scan(ScanPattern.STEP)
    gen = RasterWaveformGenerator(scan)
    step_chunk = gen.next_chunk(SAMPLE_RATE, 4)
    scan.pattern = ScanPattern.RAMP
    ramp_chunk = gen.next_chunk(SAMPLE_RATE, 4)

    assert np.ptp(step_chunk[0]) == 0
    np.testing.assert_allclose(np.diff(ramp_chunk[0]), 0.25)


def test_reset_rewinds(square_scan):
    gen = RasterWaveformGenerator(square_scan)
    first = gen.next_chunk(SAMPLE_RATE, 10)
    list(gen.chunks(SAMPLE_RATE, 10))
    assert gen.at_end

    gen.reset()
    assert gen.cursor.pixel_index == 0
    assert not gen.at_end
    np.testing.assert_array_equal(gen.next_chunk(SAMPLE_RATE, 10), first)


def test_empty_grid_is_immediately_complete():
    scan = ScanDescriptor(origin=(0, 0), size=(1, 1), step=3, dwell_time="1 ms")
    gen = RasterWaveformGenerator(scan)
    assert gen.at_end
    assert gen.next_chunk(SAMPLE_RATE, 100) is None


@pytest.mark.parametrize("sample_rate, max_buffer_size", [
    (0, 100),
    (-1000.0, 100),
    ("1 kS/s", 0),
    ("1 kS/s", -5),
    ("1 kS/s", 3),      # smaller than one 4-sample pixel
])
def test_no_pixel_budget_returns_none(sample_rate, max_buffer_size):
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    assert gen.next_chunk(sample_rate, max_buffer_size) is None
    assert gen.cursor.pixel_index == 0
    assert not gen.at_end


def test_small_buffer_does_not_stall_iteration():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    assert list(gen.chunks(SAMPLE_RATE, 3)) == []
    assert gen.next_chunk(SAMPLE_RATE, 4).shape == (2, 4)


def test_completed_scan_returns_none_for_any_buffer():
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    list(gen.chunks(SAMPLE_RATE, 8))
    assert gen.at_end
    assert gen.next_chunk(SAMPLE_RATE, 3) is None
    assert gen.next_chunk(SAMPLE_RATE, 0) is None
    assert gen.next_chunk(0, 100) is None


@pytest.mark.parametrize("max_buffer_size", [2.5, "100", None, True])
def test_non_integer_buffer_size_raises(max_buffer_size):
    gen = RasterWaveformGenerator(make_scan(ScanPattern.RAMP))
    with pytest.raises(TypeError):
        gen.next_chunk(SAMPLE_RATE, max_buffer_size)
    assert gen.cursor.pixel_index == 0


def test_numpy_integer_buffer_size(square_scan):
    gen = RasterWaveformGenerator(square_scan)
    assert gen.next_chunk(SAMPLE_RATE, np.int64(10)).shape == (2, 10)


def test_mismatched_cursor_raises(square_scan):
    with pytest.raises(ValueError):
        RasterWaveformGenerator(square_scan, cursor=ScanCursor(3))


def test_shared_cursor_object(square_scan):
    cursor = ScanCursor(square_scan.total_pixels)
    gen = RasterWaveformGenerator(square_scan, cursor=cursor)
    gen.next_chunk(SAMPLE_RATE, 10)
    assert gen.cursor is cursor
    assert cursor.pixel_index == 10


def test_cursor():
    cursor = ScanCursor(10)
    assert cursor.remaining == 10
    cursor.advance(4)
    assert cursor.pixel_index == 4
    cursor.advance(100)
    assert cursor.pixel_index == 10
    assert cursor.at_end
    with pytest.raises(ValueError):
        cursor.advance(-1)
    cursor.reset()
    assert cursor.pixel_index == 0 and not cursor.at_end
