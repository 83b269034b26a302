# WORKFLOW: Measurement value parsing for lab-result fields in the CT datasets.
# Used by: Cleaning pass, dataset record models, CSV/JSON/database exports
# Functions:
# 1. is_empty_measurement() - "not reported" conventions ("", ".", "-", "--...")
# 2. is_error_measurement() - known garbage patterns, coerced to empty
# 3. is_trace_measurement() - below limit of quantification ("TRC", "<LOQ", "<0.1")
# 4. Measure.from_string() - classify and parse a raw feed value
# 5. Measure.as_csv() / as_sql() / as_sql_value() / to_json_value() - per-format output
#
# Parsing flow: raw string -> empty test -> error test -> trace test -> float parse -> Measure
# Each output format renders empty/zero/trace differently; see the serializer docstrings.

"""
Measurement value parsing for lab-result fields in the CT datasets.
"""

import logging
import math
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, Optional, Tuple, Union

from pydantic_core import core_schema

logger = logging.getLogger(__name__)

# Structured-format marker for trace amounts
TRACE_JSON_MARKER = "<0.01"

_ERROR_CHARS = ",`/()"


class ParseError(ValueError):
    """Raised when a raw value is not a recognized measurement."""

    def __init__(self, raw: Any, reason: str = "not a number"):
        self.raw = raw
        super().__init__(f"Invalid measurement {_describe(raw)}: {reason}")


def _describe(raw: Any) -> str:
    # Huge ints exceed the int-to-str conversion limit
    if isinstance(raw, int) and raw.bit_length() > 64:
        return f"<{raw.bit_length()}-bit integer>"
    return repr(raw)


@dataclass(frozen=True)
class ErrorPatterns:
    """
    Known-bad values observed in the upstream feed.

    Matching values are treated as empty measurements. New bad rows show up
    as the feed evolves, so the set is extended from configuration rather
    than edited in place.
    """

    literals: FrozenSet[str] = frozenset()
    prefixes: Tuple[str, ...] = ()

    def matches(self, value: str) -> bool:
        return value in self.literals or value.startswith(self.prefixes)

    def extend(self, literals: Iterable[str] = (), prefixes: Iterable[str] = ()) -> "ErrorPatterns":
        new_prefixes = tuple(p for p in prefixes if p and p not in self.prefixes)
        return ErrorPatterns(
            literals=self.literals | frozenset(v for v in literals if v),
            prefixes=self.prefixes + new_prefixes,
        )


DEFAULT_ERROR_PATTERNS = ErrorPatterns(
    literals=frozenset({"0<0.10"}),
    prefixes=("terpinolene: 1.22", "a-Ocimene: 1.08"),
)


def is_empty_measurement(value: str) -> bool:
    """
    Check whether a raw value means "not reported".

    Args:
        value: Raw measurement string

    Returns:
        True for "", ".", "-" and anything starting with "--"
    """
    return value in ("", ".", "-") or value.startswith("--")


def is_error_measurement(value: str, patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS) -> bool:
    """
    Check whether a raw value matches a known garbage pattern.

    Args:
        value: Raw measurement string
        patterns: Known-bad literals and prefixes

    Returns:
        True if the value should be treated as an empty measurement
    """
    # Double decimal points, e.g. "1.1."
    if value.count(".") > 1:
        return True

    # Commas, backticks, slashes and parentheses. A single leading comma is
    # stripped by the parser, so it does not count here.
    body = value[1:] if value.startswith(",") else value
    if any(c in _ERROR_CHARS for c in body):
        return True

    # Annotations like "a1.0" or "terpinolene: 1.22"
    if value and value[0] in string.ascii_letters and any(c in string.digits for c in value):
        return True

    return patterns.matches(value)


def is_trace_measurement(value: str) -> bool:
    """
    Check whether a raw value reports a trace amount.

    Args:
        value: Raw measurement string

    Returns:
        True for "TRC", anything containing "LOQ", and anything starting with "<"
    """
    return value == "TRC" or "LOQ" in value or value.startswith("<")


def _strip_decorations(value: str) -> str:
    if value.startswith(","):
        value = value[1:]
    if value.startswith(">"):
        value = value[1:]
    if value.endswith("%"):
        value = value[:-1]
    return value


class MeasureState(str, Enum):
    EMPTY = "empty"
    ZERO = "zero"
    TRACE = "trace"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class Measure:
    """
    A lab measurement: empty, zero, trace, or a numeric amount.

    ``value`` only carries meaning for NUMERIC; the other states always hold 0.0.
    """

    state: MeasureState = MeasureState.EMPTY
    value: float = 0.0

    def __post_init__(self):
        if not isinstance(self.state, MeasureState):
            object.__setattr__(self, "state", MeasureState(self.state))
        if self.state is MeasureState.NUMERIC:
            if not math.isfinite(self.value):
                raise ValueError(f"Numeric measure must be finite, got {self.value!r}")
        elif self.value != 0.0:
            raise ValueError(f"{self.state.value} measure cannot carry value {self.value!r}")

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def empty(cls) -> "Measure":
        return cls(MeasureState.EMPTY)

    @classmethod
    def zero(cls) -> "Measure":
        return cls(MeasureState.ZERO)

    @classmethod
    def trace(cls) -> "Measure":
        return cls(MeasureState.TRACE)

    @classmethod
    def from_amount(cls, amount: float) -> "Measure":
        """
        Build a measure from a known amount.

        Args:
            amount: Measured amount; 0 is a zero reading, negatives are trace

        Returns:
            Measure in the matching state

        Raises:
            ParseError: If the amount is not a finite float (NaN, infinity,
                or an integer too large to convert)
        """
        try:
            value = float(amount)
        except OverflowError:
            raise ParseError(amount, "not a finite number") from None
        if not math.isfinite(value):
            raise ParseError(amount, "not a finite number")

        if value == 0:
            return cls.zero()
        if value < 0:
            return cls.trace()
        return cls(MeasureState.NUMERIC, value)

    @classmethod
    def from_string(cls, raw: str, patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS) -> "Measure":
        """
        Parse a raw feed value.

        Known garbage is normalized to an empty measure; only values that match
        no known pattern and still fail to parse as a number raise.

        Args:
            raw: Raw measurement string
            patterns: Known-bad literals and prefixes

        Returns:
            Parsed Measure

        Raises:
            ParseError: If the value is not a recognized measurement
        """
        value = raw.strip()

        if is_empty_measurement(value):
            return cls.empty()
        if is_error_measurement(value, patterns):
            logger.debug(f"Treating erroneous measurement {raw!r} as empty")
            return cls.empty()
        if is_trace_measurement(value):
            return cls.trace()

        number = _strip_decorations(value)
        try:
            amount = float(number)
        except ValueError:
            raise ParseError(raw) from None

        if not math.isfinite(amount):
            raise ParseError(raw, "not a finite number")

        return cls.from_amount(amount)

    @classmethod
    def from_csv(cls, raw: str, patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS) -> "Measure":
        """Parse a CSV field; an empty field is an empty measure."""
        if raw == "":
            return cls.empty()
        return cls.from_string(raw, patterns)

    @classmethod
    def from_json_value(cls, raw: Any, patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS) -> "Measure":
        """
        Parse a decoded JSON value (API response, cache file or our own export).

        Args:
            raw: None, a string, a number, or an existing Measure
            patterns: Known-bad literals and prefixes used for strings

        Returns:
            Parsed Measure

        Raises:
            ParseError: If the value cannot be interpreted as a measurement
        """
        if raw is None:
            return cls.empty()
        if isinstance(raw, Measure):
            return raw
        if isinstance(raw, str):
            return cls.from_string(raw, patterns)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cls.from_amount(raw)
        raise ParseError(raw, f"unsupported type {type(raw).__name__}")

    # ------------------------------------------------------------------
    # Queries

    @property
    def is_empty(self) -> bool:
        return self.state is MeasureState.EMPTY

    @property
    def is_zero(self) -> bool:
        return self.state is MeasureState.ZERO

    @property
    def is_trace(self) -> bool:
        return self.state is MeasureState.TRACE

    @property
    def is_numeric(self) -> bool:
        return self.state is MeasureState.NUMERIC

    @property
    def is_valid_percent(self) -> bool:
        """Empty, zero and trace are always valid; amounts must lie in [0, 100]."""
        if self.state is not MeasureState.NUMERIC:
            return True
        return 0 <= self.value <= 100

    def amount(self) -> Tuple[float, bool, bool]:
        """Return (value, is_trace, is_empty); value is 0 unless numeric."""
        if self.state is MeasureState.NUMERIC:
            return self.value, False, False
        return 0.0, self.is_trace, self.is_empty

    # ------------------------------------------------------------------
    # Serialization

    def as_csv(self) -> str:
        """CSV field: empty and trace are blank, zero is "0"."""
        if self.state is MeasureState.NUMERIC:
            return "%f" % self.value
        if self.state is MeasureState.ZERO:
            return "0"
        return ""

    def as_sql(self) -> str:
        """SQL literal: empty and trace are NULL, zero is 0."""
        if self.state is MeasureState.NUMERIC:
            return "%f" % self.value
        if self.state is MeasureState.ZERO:
            return "0"
        return "NULL"

    def as_sql_value(self) -> Optional[Union[int, float]]:
        """Driver value for parameterized inserts."""
        if self.state is MeasureState.NUMERIC:
            return self.value
        if self.state is MeasureState.ZERO:
            return 0
        return None

    def to_json_value(self) -> Optional[Union[int, float, str]]:
        """JSON value: empty is null, trace is the "<0.01" marker."""
        if self.state is MeasureState.NUMERIC:
            return self.value
        if self.state is MeasureState.ZERO:
            return 0
        if self.state is MeasureState.TRACE:
            return TRACE_JSON_MARKER
        return None

    # ------------------------------------------------------------------
    # pydantic integration

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.with_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda measure: measure.to_json_value(),
                when_used="json",
            ),
        )

    @classmethod
    def _validate(cls, raw: Any, info) -> "Measure":
        context = info.context or {}
        patterns = context.get("error_patterns", DEFAULT_ERROR_PATTERNS)
        return cls.from_json_value(raw, patterns)
