"""Satoshi numbering: ordinal names, degrees, decimals, percentiles and rarity."""

from __future__ import annotations

import bisect
import decimal
import enum
import functools
import math
import re
from dataclasses import dataclass

COIN_VALUE = 100_000_000
DIFFCHANGE_INTERVAL = 2016
SUBSIDY_HALVING_INTERVAL = 210_000
CYCLE_EPOCHS = 6
FIRST_POST_SUBSIDY_EPOCH = 33

_U64_MAX = 2**64 - 1
_U64_PATTERN = re.compile(r"\+?[0-9]+")
_ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def _parse_u64(text: str) -> int:
    """Parse an unsigned 64-bit integer, accepting only ASCII digits."""
    if not text:
        raise ValueError("cannot parse integer from empty string")
    if not _U64_PATTERN.fullmatch(text):
        raise ValueError("invalid digit found in string")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError("number too large to fit in target type")
    return value


def _parse_f64(text: str) -> float:
    if not text or any(c.isspace() or c == "_" for c in text):
        raise ValueError("invalid float literal")
    try:
        return float(text)
    except ValueError:
        raise ValueError("invalid float literal") from None


def _format_float(value: float) -> str:
    """Format a float in shortest round-trip form without exponent notation."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(decimal.Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _round_half_away(value: float) -> int:
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def _epoch_subsidy(epoch: int) -> int:
    if epoch < FIRST_POST_SUBSIDY_EPOCH:
        return (50 * COIN_VALUE) >> epoch
    return 0


def _compute_starting_sats() -> tuple[int, ...]:
    sats = []
    total = 0
    for epoch in range(FIRST_POST_SUBSIDY_EPOCH + 1):
        sats.append(total)
        total += _epoch_subsidy(epoch) * SUBSIDY_HALVING_INTERVAL
    return tuple(sats)


_STARTING_SATS = _compute_starting_sats()


def _epoch_starting_sat(epoch: int) -> int:
    return _STARTING_SATS[min(epoch, len(_STARTING_SATS) - 1)]


def subsidy(height: int) -> int:
    """Block subsidy in sats at the given height."""
    return _epoch_subsidy(height // SUBSIDY_HALVING_INTERVAL)


def starting_sat(height: int) -> "Sat":
    """First sat mined in the block at the given height."""
    epoch = height // SUBSIDY_HALVING_INTERVAL
    epoch_start_height = epoch * SUBSIDY_HALVING_INTERVAL
    return Sat(
        _epoch_starting_sat(epoch) + (height - epoch_start_height) * _epoch_subsidy(epoch)
    )


def epoch_starting_sats() -> list["Sat"]:
    """The first sat of every reward epoch, ending with the total supply."""
    return [Sat(n) for n in _STARTING_SATS]


@dataclass(frozen=True)
class Degree:
    """Degree notation: cycle, block in epoch, block in period, sat in block."""

    hour: int
    minute: int
    second: int
    third: int

    def __str__(self) -> str:
        return f"{self.hour}°{self.minute}′{self.second}″{self.third}‴"


@dataclass(frozen=True)
class SatDecimal:
    """Decimal notation: block height and offset of the sat within the block."""

    height: int
    offset: int

    def __str__(self) -> str:
        return f"{self.height}.{self.offset}"


class Rarity(enum.IntEnum):
    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4
    MYTHIC = 5

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_sat(cls, sat: "Sat") -> "Rarity":
        d = sat.degree()
        if d.hour == 0 and d.minute == 0 and d.second == 0 and d.third == 0:
            return cls.MYTHIC
        if d.minute == 0 and d.second == 0 and d.third == 0:
            return cls.LEGENDARY
        if d.minute == 0 and d.third == 0:
            return cls.EPIC
        if d.second == 0 and d.third == 0:
            return cls.RARE
        if d.third == 0:
            return cls.UNCOMMON
        return cls.COMMON

    @classmethod
    def parse(cls, text: str) -> "Rarity":
        for member in cls:
            if str(member) == text:
                return member
        raise ValueError(f"invalid rarity: {text}")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Sat:
    """A satoshi, identified by its ordinal number."""

    n: int

    SUPPLY = _STARTING_SATS[-1]

    def __post_init__(self) -> None:
        if not isinstance(self.n, int) or not 0 <= self.n <= _U64_MAX:
            raise ValueError(f"sat number out of range: {self.n!r}")

    def __str__(self) -> str:
        return str(self.n)

    def __int__(self) -> int:
        return self.n

    def __hash__(self) -> int:
        return hash(self.n)

    @staticmethod
    def _value(other: object) -> int | None:
        if isinstance(other, Sat):
            return other.n
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __eq__(self, other: object) -> bool:
        value = self._value(other)
        if value is None:
            return NotImplemented
        return self.n == value

    def __lt__(self, other: object) -> bool:
        value = self._value(other)
        if value is None:
            return NotImplemented
        return self.n < value

    def __add__(self, other: int) -> "Sat":
        if isinstance(other, int) and not isinstance(other, bool):
            return Sat(self.n + other)
        return NotImplemented

    def degree(self) -> Degree:
        height = self.height()
        return Degree(
            hour=height // (CYCLE_EPOCHS * SUBSIDY_HALVING_INTERVAL),
            minute=height % SUBSIDY_HALVING_INTERVAL,
            second=height % DIFFCHANGE_INTERVAL,
            third=self.third(),
        )

    def height(self) -> int:
        epoch = self.epoch()
        return epoch * SUBSIDY_HALVING_INTERVAL + self.epoch_position() // _epoch_subsidy(epoch)

    def cycle(self) -> int:
        return self.epoch() // CYCLE_EPOCHS

    def percentile(self) -> str:
        return _format_float(float(self.n) / float(Sat.LAST.n) * 100.0) + "%"

    def epoch(self) -> int:
        index = bisect.bisect_right(_STARTING_SATS, self.n) - 1
        return min(index, FIRST_POST_SUBSIDY_EPOCH)

    def period(self) -> int:
        return self.height() // DIFFCHANGE_INTERVAL

    def third(self) -> int:
        return self.epoch_position() % _epoch_subsidy(self.epoch())

    def epoch_position(self) -> int:
        return self.n - _epoch_starting_sat(self.epoch())

    def decimal(self) -> SatDecimal:
        return SatDecimal(height=self.height(), offset=self.third())

    def rarity(self) -> Rarity:
        return Rarity.from_sat(self)

    def is_common(self) -> bool:
        """Fast check for whether this sat's rarity is common."""
        epoch = self.epoch()
        return (self.n - _epoch_starting_sat(epoch)) % _epoch_subsidy(epoch) != 0

    def name(self) -> str:
        x = Sat.SUPPLY - self.n
        letters = []
        while x > 0:
            letters.append(_ALPHABET[(x - 1) % 26])
            x = (x - 1) // 26
        return "".join(reversed(letters))

    @classmethod
    def parse(cls, text: str) -> "Sat":
        """Parse a sat from integer, name, degree, percentile or decimal notation."""
        if any("a" <= c <= "z" for c in text):
            return cls._from_name(text)
        if "°" in text:
            return cls._from_degree(text)
        if "%" in text:
            return cls._from_percentile(text)
        if "." in text:
            return cls._from_decimal(text)
        sat = cls(_parse_u64(text))
        if sat > Sat.LAST:
            raise ValueError("invalid sat")
        return sat

    @classmethod
    def _from_name(cls, text: str) -> "Sat":
        x = 0
        for c in text:
            if not "a" <= c <= "z":
                raise ValueError(f"invalid character in sat name: {c}")
            x = x * 26 + ord(c) - ord("a") + 1
        if x > cls.SUPPLY:
            raise ValueError("sat name out of range")
        return cls(cls.SUPPLY - x)

    @classmethod
    def _from_degree(cls, text: str) -> "Sat":
        cycle_number, sep, rest = text.partition("°")
        if not sep:
            raise ValueError("missing degree symbol")
        cycle_number = _parse_u64(cycle_number)

        epoch_offset, sep, rest = rest.partition("′")
        if not sep:
            raise ValueError("missing minute symbol")
        epoch_offset = _parse_u64(epoch_offset)
        if epoch_offset >= SUBSIDY_HALVING_INTERVAL:
            raise ValueError("invalid epoch offset")

        period_offset, sep, rest = rest.partition("″")
        if not sep:
            raise ValueError("missing second symbol")
        period_offset = _parse_u64(period_offset)
        if period_offset >= DIFFCHANGE_INTERVAL:
            raise ValueError("invalid period offset")

        cycle_start_epoch = cycle_number * CYCLE_EPOCHS
        halving_increment = SUBSIDY_HALVING_INTERVAL % DIFFCHANGE_INTERVAL

        # The difference between period and epoch offsets grows by 336 per halving.
        relationship = period_offset + SUBSIDY_HALVING_INTERVAL * CYCLE_EPOCHS - epoch_offset
        if relationship % halving_increment != 0:
            raise ValueError(
                "relationship between epoch offset and period offset must be multiple of 336"
            )

        epochs_since_cycle_start = relationship % DIFFCHANGE_INTERVAL // halving_increment
        epoch = cycle_start_epoch + epochs_since_cycle_start
        height = epoch * SUBSIDY_HALVING_INTERVAL + epoch_offset

        block_offset_text, sep, remainder = rest.partition("‴")
        if sep:
            block_offset = _parse_u64(block_offset_text)
            rest = remainder
        else:
            block_offset = 0

        if rest:
            raise ValueError("trailing characters")
        if block_offset >= subsidy(height):
            raise ValueError("invalid block offset")

        return starting_sat(height) + block_offset

    @classmethod
    def _from_decimal(cls, text: str) -> "Sat":
        height_text, sep, offset_text = text.partition(".")
        if not sep:
            raise ValueError("missing period")
        height = _parse_u64(height_text)
        offset = _parse_u64(offset_text)
        if offset >= subsidy(height):
            raise ValueError("invalid block offset")
        return starting_sat(height) + offset

    @classmethod
    def _from_percentile(cls, text: str) -> "Sat":
        if not text.endswith("%"):
            raise ValueError(f"invalid percentile: {text}")
        percentile = _parse_f64(text[:-1])
        if percentile < 0.0:
            raise ValueError(f"invalid percentile: {_format_float(percentile)}")
        last = float(cls.LAST.n)
        if math.isnan(percentile):
            return cls(0)
        scaled = percentile / 100.0 * last
        if math.isinf(scaled) or scaled > last:
            raise ValueError(f"invalid percentile: {_format_float(percentile)}")
        n = _round_half_away(scaled)
        if n > last:
            raise ValueError(f"invalid percentile: {_format_float(percentile)}")
        return cls(n)


Sat.LAST = Sat(Sat.SUPPLY - 1)