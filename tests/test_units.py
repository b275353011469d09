import pytest

from rasterwave.components import units


def test_parse_time_with_units():
    assert units.Time("2 ms") == pytest.approx(2e-3)
    assert units.Time("20 μs") == pytest.approx(20e-6)
    assert units.Time("20 us") == pytest.approx(20e-6)
    assert units.Time(0.5) == 0.5


def test_parse_sample_rate_with_units():
    assert units.SampleRate("200 kS/s") == pytest.approx(200e3)
    assert units.SampleRate("1.5 MS/s") == pytest.approx(1.5e6)


def test_invalid_unit_raises():
    with pytest.raises(ValueError):
        units.Time("5 V")


def test_invalid_format_raises():
    with pytest.raises(ValueError):
        units.Time("five ms")


def test_wrong_input_type_raises():
    with pytest.raises(TypeError):
        units.Time([1, 2])


def test_convert_between_same_dimension():
    rate = units.SampleRate(units.Frequency("1 kHz"))
    assert isinstance(rate, units.SampleRate)
    assert rate == pytest.approx(1e3)


def test_convert_between_different_dimension_raises():
    with pytest.raises(TypeError):
        units.Time(units.Frequency("1 kHz"))


def test_time_times_sample_rate_is_plain_number():
    n = units.Time("2 ms") * units.SampleRate("10 kS/s")
    assert type(n) is float
    assert n == pytest.approx(20.0)


def test_scalar_arithmetic_keeps_type():
    t = units.Time("1 ms") * 100
    assert isinstance(t, units.Time)
    assert t == pytest.approx(0.1)
    assert isinstance(-t, units.Time)
    assert isinstance(t + units.Time("1 s"), units.Time)


def test_adding_different_quantities_raises():
    with pytest.raises(TypeError):
        units.Time("1 s") + units.Voltage("1 V")


def test_str_uses_readable_unit():
    assert str(units.Time("2 ms")) == "2 ms"
    assert str(units.SampleRate("200 kS/s")) == "200 kS/s"


def test_voltage_range_plus_minus():
    limits = units.VoltageRange("±10 V")
    assert limits.min == -10
    assert limits.max == 10
    assert limits.range == 20
    assert limits.within_range(9.5)
    assert not limits.within_range(-10.5)


def test_voltage_range_min_max():
    limits = units.VoltageRange("-500 mV", "2 V")
    assert limits.min == pytest.approx(-0.5)
    assert units.VoltageRange("-5 V", "2 V") == units.VoltageRange(-5.0, 2.0)


def test_voltage_range_inverted_raises():
    with pytest.raises(ValueError):
        units.VoltageRange("5 V", "-5 V")
