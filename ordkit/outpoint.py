"""Transaction ids, outpoints, inscription ids and sat points."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass

_HEX64 = re.compile(r"[0-9a-fA-F]{64}")
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_TXID_LEN = 64
_OUTPOINT_MAX_LEN = 75
_SATPOINT_ENCODED_LEN = 44


def _parse_uint(text: str, maximum: int) -> int:
    """Parse an unsigned decimal integer that must not exceed ``maximum``."""
    if not text:
        raise ValueError("cannot parse integer from empty string")
    digits = text[1:] if text.startswith("+") else text
    if not digits or not all("0" <= c <= "9" for c in digits):
        raise ValueError("invalid digit found in string")
    value = int(digits)
    if value > maximum:
        raise ValueError("number too large to fit in target type")
    return value


class InscriptionIdError(ValueError):
    """Raised when an inscription id cannot be parsed.

    ``kind`` is one of ``character``, ``length``, ``separator``, ``txid`` or ``index``.
    """

    def __init__(self, kind: str, value: object, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.value = value


@dataclass(frozen=True, order=True)
class Txid:
    """A transaction id, stored in internal byte order and shown byte-reversed."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != 32:
            raise ValueError(f"txid must be 32 bytes, got {len(self.data)}")

    def __str__(self) -> str:
        return self.data[::-1].hex()

    @classmethod
    def parse(cls, text: str) -> "Txid":
        if len(text) != _TXID_LEN:
            raise ValueError(f"invalid hex string length {len(text)} (expected {_TXID_LEN})")
        if not _HEX64.fullmatch(text):
            raise ValueError("invalid hex character")
        return cls(bytes.fromhex(text)[::-1])


@dataclass(frozen=True, order=True)
class OutPoint:
    """A transaction output: txid and output index."""

    txid: Txid
    vout: int

    def __post_init__(self) -> None:
        if not 0 <= self.vout <= _U32_MAX:
            raise ValueError(f"vout out of range: {self.vout}")

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"

    @classmethod
    def parse(cls, text: str) -> "OutPoint":
        if len(text) > _OUTPOINT_MAX_LEN:
            raise ValueError("outpoint string too long")
        txid_text, sep, vout_text = text.partition(":")
        if not sep or not txid_text or not vout_text:
            raise ValueError("outpoint not in <txid>:<vout> format")
        txid = Txid.parse(txid_text)
        if len(vout_text) > 1 and vout_text[0] in "0+":
            raise ValueError("vout should be canonically formatted")
        return cls(txid, _parse_uint(vout_text, _U32_MAX))


@dataclass(frozen=True)
class InscriptionId:
    """Identifies an inscription by its reveal txid and index within it."""

    txid: Txid
    index: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.index <= _U32_MAX:
            raise ValueError(f"inscription index out of range: {self.index}")

    def __str__(self) -> str:
        return f"{self.txid}i{self.index}"

    @classmethod
    def parse(cls, text: str) -> "InscriptionId":
        for char in text:
            if not char.isascii():
                raise InscriptionIdError("character", char, f"invalid character: '{char}'")

        if len(text) < _TXID_LEN + 2:
            raise InscriptionIdError("length", len(text), f"invalid length: {len(text)}")

        separator = text[_TXID_LEN]
        if separator != "i":
            raise InscriptionIdError("separator", separator, f"invalid separator: `{separator}`")

        try:
            txid = Txid.parse(text[:_TXID_LEN])
        except ValueError as err:
            raise InscriptionIdError("txid", str(err), f"invalid txid: {err}") from err

        try:
            index = _parse_uint(text[_TXID_LEN + 1 :], _U32_MAX)
        except ValueError as err:
            raise InscriptionIdError("index", str(err), f"invalid index: {err}") from err

        return cls(txid, index)


@dataclass(frozen=True, order=True)
class SatPoint:
    """A position of a sat: an outpoint and an offset into its value."""

    outpoint: OutPoint
    offset: int

    def __post_init__(self) -> None:
        if not 0 <= self.offset <= _U64_MAX:
            raise ValueError(f"offset out of range: {self.offset}")

    def __str__(self) -> str:
        return f"{self.outpoint}:{self.offset}"

    @classmethod
    def parse(cls, text: str) -> "SatPoint":
        outpoint_text, sep, offset_text = text.rpartition(":")
        if not sep:
            raise ValueError(f"invalid satpoint: {text}")
        return cls(OutPoint.parse(outpoint_text), _parse_uint(offset_text, _U64_MAX))

    def encode(self) -> bytes:
        """Consensus encoding: txid, little-endian vout and little-endian offset."""
        return self.outpoint.txid.data + struct.pack("<IQ", self.outpoint.vout, self.offset)

    @classmethod
    def decode(cls, data: bytes) -> "SatPoint":
        if len(data) != _SATPOINT_ENCODED_LEN:
            raise ValueError(
                f"satpoint encoding must be {_SATPOINT_ENCODED_LEN} bytes, got {len(data)}"
            )
        vout, offset = struct.unpack("<IQ", data[32:])
        return cls(OutPoint(Txid(bytes(data[:32])), vout), offset)