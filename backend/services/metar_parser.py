"""Decode the leading field groups of a raw METAR report.

A METAR is a fixed-order, space-delimited line, e.g.

    METAR CYTZ 051900Z AUTO 17011G20KT 9SM CLR 29/23 A3006 RMK SLP178

Only the groups up to and including wind are decoded: report type, station,
date/time, modifier and wind. Visibility, sky condition, temperature,
altimeter and remarks are returned untouched in ``unparsed``.

The parser walks an immutable tuple of tokens with a cursor. Every step looks
at the token under the cursor and returns a ``StepResult``; optional groups
only advance the cursor on a match, mandatory positions always advance.
"""

import logging
import re
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from models.metar import DecodedMetar, Diagnostic, ParsedField, ParsedMetar, Timestamp, Wind

logger = logging.getLogger(__name__)

REPORT_TYPE_RE = re.compile(r"^(?P<reportType>METAR|SPECI)$")

# DDHHMMZ: day of month, hours and minutes in Zulu. No month or year is given.
# re.ASCII keeps \d to 0-9.
TIME_RE = re.compile(r"^(?P<dayOfMonth>\d{2})(?P<hours>\d\d)(?P<mins>\d\d)(?P<timezone>Z)$", re.ASCII)

# AUTO = automated station, COR = corrected report
MODIFIER_RE = re.compile(r"^(?P<modifier>AUTO|COR)$")

# 36007G15KT = from 360 at 7 knots gusting 15
WIND_RE = re.compile(
    r"^(?P<direction>VRB|\d{3})(?P<speed>\d\d)(G(?P<gustingSpeed>\d\d))?(?P<speedUnits>[A-Z]{2})$",
    re.ASCII,
)


class InvalidInputError(ValueError):
    """Raised when the whole report cannot be tokenized."""


class StepResult(NamedTuple):
    consumed: bool
    cursor: int
    value: Optional[ParsedField] = None


def tokenize(report) -> Tuple[str, ...]:
    if not isinstance(report, str):
        raise InvalidInputError(f"Invalid data; must be a string, got {type(report).__name__}")
    tokens = tuple(report.split())
    if not tokens:
        raise InvalidInputError("Invalid data length; report contains no fields")
    return tokens


def _token_at(tokens: Sequence[str], cursor: int) -> Optional[str]:
    return tokens[cursor] if cursor < len(tokens) else None


def optional_token(pattern: re.Pattern) -> Callable[[Sequence[str], int], StepResult]:
    """Consume the current token only if it matches ``pattern``."""

    def step(tokens: Sequence[str], cursor: int) -> StepResult:
        token = _token_at(tokens, cursor)
        if token is not None and pattern.match(token):
            return StepResult(True, cursor + 1, token)
        return StepResult(False, cursor)

    return step


def mandatory_token(
    pattern: Optional[re.Pattern] = None,
    build: Optional[Callable[[dict], ParsedField]] = None,
) -> Callable[[Sequence[str], int], StepResult]:
    """Always consume the current token.

    With a ``pattern`` the value is only produced on a match; a token that does
    not match is still consumed and yields no value. Without a pattern the raw
    token is the value.
    """

    def step(tokens: Sequence[str], cursor: int) -> StepResult:
        token = _token_at(tokens, cursor)
        if token is None:
            return StepResult(False, cursor)
        if pattern is None:
            return StepResult(True, cursor + 1, token)
        match = pattern.match(token)
        if match is None:
            return StepResult(True, cursor + 1)
        groups = match.groupdict()
        return StepResult(True, cursor + 1, build(groups) if build else token)

    return step


class FieldParser:
    """Sequential consumer of METAR field groups."""

    # (record key, step, is the position mandatory)
    STEPS = (
        ("reportType", optional_token(REPORT_TYPE_RE), False),
        ("ICAO", mandatory_token(), True),
        ("timestamp", mandatory_token(TIME_RE, lambda g: Timestamp(**g)), True),
        ("modifier", optional_token(MODIFIER_RE), False),
        ("wind", mandatory_token(WIND_RE, lambda g: Wind(**g)), True),
    )

    def parse(self, report: str) -> DecodedMetar:
        tokens = tokenize(report)
        fields = {}
        diagnostics: List[Diagnostic] = []
        cursor = 0

        for name, step, mandatory in self.STEPS:
            token = _token_at(tokens, cursor)
            result = step(tokens, cursor)
            cursor = result.cursor
            if result.value is not None:
                fields[name] = result.value
                continue
            if not mandatory:
                continue
            # mandatory position that produced nothing
            if token is None:
                message = "report ended before this field"
            else:
                message = "token did not match and was discarded"
            diagnostics.append(Diagnostic(field=name, token=token, message=message))
            logger.warning(f"⚠️ METAR {report!r}: {name} {message} ({token!r})")

        return DecodedMetar(
            raw=report,
            parsed=ParsedMetar(**fields),
            diagnostics=diagnostics,
            unparsed=list(tokens[cursor:]),
        )


_parser = FieldParser()


def parse_metar(report: str) -> DecodedMetar:
    """Parse a raw METAR line. Raises InvalidInputError for non-string or empty input."""
    return _parser.parse(report)
