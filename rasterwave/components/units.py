import re
from typing import Dict


class UnitQuantity(float):
    """
    Represents a single value with an associated unit.

    The value is stored in the base unit of the subclass (first key of
    ALLOWED_UNITS_AND_MULTIPLIERS). Floats and ints are interpreted as the base
    unit, strings are parsed as '<value> <unit>' (e.g. "2 ms", "100 kS/s").

    Supported mathematical operations:
    - Add/subtract two quantities of the same class, returns same class
    - Negate, returns same class
    - Multiply/divide by a plain int/float, returns same class
    - Multiply two quantities whose DIMENSIONAL_QUANTITY cancel (e.g. Time and
        SampleRate), returns a plain float
    - Divide two quantities of the same DIMENSIONAL_QUANTITY, returns a plain
        float
    """
    DIMENSIONAL_QUANTITY: tuple[str, str] = ('1', '1') # unity over unity (dimensionless)
    ALLOWED_UNITS_AND_MULTIPLIERS: Dict[str, float] = None  # defined in subclasses

    def __new__(cls, quantity: "str | float | UnitQuantity"):
        if (isinstance(quantity, UnitQuantity)
                and quantity.DIMENSIONAL_QUANTITY != cls.DIMENSIONAL_QUANTITY):
            raise TypeError(
                f"Can not convert {type(quantity).__name__} to {cls.__name__}."
            )
        if isinstance(quantity, str):
            value, unit = cls._parse_value_with_unit(quantity)
            if unit not in cls.ALLOWED_UNITS_AND_MULTIPLIERS:
                raise ValueError(
                    f"Invalid unit '{unit}' for {cls.__name__}. Allowed units "
                    f"are: {list(cls.ALLOWED_UNITS_AND_MULTIPLIERS.keys())}."
                )
            base_value = value * cls.ALLOWED_UNITS_AND_MULTIPLIERS[unit]
        elif isinstance(quantity, (int, float)) and not isinstance(quantity, bool):
            base_value = float(quantity)
        else:
            raise TypeError(
                "Input must be a string with units or a float representing the "
                "base unit."
            )

        instance = super().__new__(cls, base_value)
        instance.unit = next(iter(cls.ALLOWED_UNITS_AND_MULTIPLIERS))
        return instance

    @staticmethod
    def _parse_value_with_unit(quantity: str) -> tuple[float, str]:
        """
        Parses a string containing a value and unit.

        Raises:
            ValueError: If the input string is not in the expected format.
        """
        pattern = r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)\s*([\w/]+)\s*$"
        match = re.match(pattern, quantity)
        if not match:
            raise ValueError(
                f"Invalid format for value with unit: '{quantity}'. "
                f"Expected format: '<value> <unit>'."
            )
        value_str, unit = match.groups()
        return float(value_str), unit

    def _get_optimal_unit(self) -> tuple[float, str]:
        """Returns the value converted to the largest unit with magnitude >= 1."""
        sorted_units = sorted(
            self.ALLOWED_UNITS_AND_MULTIPLIERS.items(),
            key=lambda x: x[1],
            reverse=True
        )
        for unit, multiplier in sorted_units:
            if abs(float(self) / multiplier) >= 1:
                return float(self) / multiplier, unit
        smallest_unit, smallest_multiplier = sorted_units[-1]
        return float(self) / smallest_multiplier, smallest_unit

    def __str__(self) -> str:
        value, unit = self._get_optimal_unit()
        return f"{value:.3g} {unit}"

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"

    def __neg__(self):
        return type(self)(-float(self))

    def __add__(self, other):
        if not isinstance(other, UnitQuantity):
            return NotImplemented
        if type(self) != type(other):
            raise TypeError("Cannot add different UnitQuantity subclasses.")
        return type(self)(float(self) + float(other))

    def __sub__(self, other):
        if not isinstance(other, UnitQuantity):
            return NotImplemented
        if type(self) != type(other):
            raise TypeError("Cannot subtract different UnitQuantity subclasses.")
        return type(self)(float(self) - float(other))

    def __mul__(self, other):
        if isinstance(other, UnitQuantity):
            if self.DIMENSIONAL_QUANTITY == tuple(reversed(other.DIMENSIONAL_QUANTITY)):
                # dimensions cancel, e.g. Time * SampleRate -> number of samples
                return float(self) * float(other)
            return NotImplemented
        if isinstance(other, (int, float)):
            return type(self)(float(self) * other)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, UnitQuantity):
            if self.DIMENSIONAL_QUANTITY == other.DIMENSIONAL_QUANTITY:
                return float(self) / float(other)
            return NotImplemented
        if isinstance(other, (int, float)):
            return type(self)(float(self) / other)
        return NotImplemented


class Voltage(UnitQuantity):
    """
    Represents a voltage value with units (e.g., V, mV).
    """
    DIMENSIONAL_QUANTITY = ('MLL', 'TTTI') # M L^2  T^-3 I^-1
    ALLOWED_UNITS_AND_MULTIPLIERS = {
        "V": 1,        # base unit: volts
        "mV": 1e-3,    # millivolts to volts
        "μV": 1e-6,    # microvolts to volts
        "uV": 1e-6,    # alias
        "kV": 1e3,     # kilovolts to volts
    }


class Frequency(UnitQuantity):
    """
    Represents a frequency value with units (e.g. Hz, kHz, MHz).
    """
    DIMENSIONAL_QUANTITY = ('1', 'T')
    ALLOWED_UNITS_AND_MULTIPLIERS = {
        "Hz": 1,        # base unit: hertz
        "kHz": 1e3,     # kilohertz to hertz
        "MHz": 1e6,     # megahertz to hertz
    }


class SampleRate(UnitQuantity):
    """
    Represents an analog output sample rate (e.g. S/s, kS/s, MS/s).

    Dimensionally equivalent to Frequency.
    """
    DIMENSIONAL_QUANTITY = ('1', 'T')
    ALLOWED_UNITS_AND_MULTIPLIERS = {
        "S/s": 1,       # base unit: samples per second
        "kS/s": 1e3,    # kilo samples per second to samples per second
        "MS/s": 1e6,    # mega samples per second to samples per second
    }


class Time(UnitQuantity):
    """
    Represents a time value with units (e.g. s, ms, μs, min)
    """
    DIMENSIONAL_QUANTITY = ('T', '1')
    ALLOWED_UNITS_AND_MULTIPLIERS = {
        "s": 1,         # base unit: seconds
        "ms": 1e-3,     # milliseconds to seconds
        "μs": 1e-6,     # microseconds to seconds
        "us": 1e-6,     # alias
        "ns": 1e-9,     # nanoseconds to seconds
        "min": 60.0,    # minutes to seconds
        "hr": 3600.0,   # hours to seconds
    }


class VoltageRange:
    """
    Range of analog output voltages, e.g. the limits of an output channel.

    Accepts either a (min, max) pair or a single "±X V" string.
    """
    def __init__(self, min: str | float, max: str | float | None = None):
        if max is None and isinstance(min, str) and min.strip().startswith("±"):
            min, max = self._parse_plus_minus_string(min)
        elif max is None:
            raise ValueError("VoltageRange requires both min and max, or a '±X V' string.")

        self._min = Voltage(min)
        self._max = Voltage(max)

        if float(self._min) >= float(self._max):
            raise ValueError(
                f"Invalid range: min ({self._min}) must be less than max ({self._max})."
            )

    @staticmethod
    def _parse_plus_minus_string(pm_str: str) -> tuple[str, str]:
        """Given '±5V' or '± 5 V', returns ('-5 V', '5 V')."""
        match = re.match(r"^[±]\s*(\d+(?:\.\d+)?)\s*([a-zA-Zμ]+)\s*$", pm_str.strip())
        if not match:
            raise ValueError(f"Unable to parse ± string '{pm_str}'.")
        numeric_part, unit_part = match.groups()
        return f"-{numeric_part} {unit_part}", f"{numeric_part} {unit_part}"

    @property
    def min(self) -> Voltage:
        return self._min

    @property
    def max(self) -> Voltage:
        return self._max

    def within_range(self, value: float) -> bool:
        """True if value (volts) lies within the range, inclusive."""
        return float(self._min) <= float(value) <= float(self._max)

    @property
    def range(self) -> Voltage:
        return Voltage(float(self._max) - float(self._min))

    def __str__(self) -> str:
        return f"{self._min} to {self._max}"

    def __repr__(self) -> str:
        return f"VoltageRange({self._min}, {self._max})"

    def __eq__(self, other):
        if not isinstance(other, VoltageRange):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    def __hash__(self):
        return hash((float(self.min), float(self.max)))
