"""Classification and parsing of the objects a user can name on the command line."""

from __future__ import annotations

import enum
import hashlib
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ordkit.outpoint import InscriptionId, OutPoint, SatPoint
from ordkit.sat import Sat

_U64_MAX = 2**64 - 1
_U128_MAX = 2**128 - 1


class Representation(enum.Enum):
    """Textual forms an object can take, checked in declaration order."""

    ADDRESS = r"^(bc|BC|tb|TB|bcrt|BCRT)1.*$"
    DECIMAL = r"^.*\..*$"
    DEGREE = r"^.*°.*′.*″(.*‴)?$"
    HASH = r"^[0-9a-fA-F]{64}$"
    INSCRIPTION_ID = r"^[0-9a-fA-F]{64}i\d+$"
    INTEGER = r"^[0-9]*$"
    NAME = r"^[a-z]{1,11}$"
    OUT_POINT = r"^[0-9a-fA-F]{64}:\d+$"
    PERCENTILE = r"^.*%$"
    SAT_POINT = r"^[0-9a-fA-F]{64}:\d+:\d+$"

    @property
    def pattern(self) -> str:
        return self.value

    @classmethod
    def classify(cls, text: str) -> "Representation":
        for representation in cls:
            if _COMPILED[representation].fullmatch(text):
                return representation
        raise ValueError("unrecognized object")


_COMPILED = {representation: re.compile(representation.value) for representation in Representation}

# Bech32 / Bech32m (BIP 173, BIP 350)

_BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_BECH32_CONST = 1
_BECH32M_CONST = 0x2BC830A3
_BECH32_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)

_HRP_NETWORKS = {"bc": "bitcoin", "tb": "testnet", "bcrt": "regtest"}
_NETWORK_HRPS = {network: hrp for hrp, network in _HRP_NETWORKS.items()}


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, generator in enumerate(_BECH32_GENERATOR):
            if (top >> i) & 1:
                chk ^= generator
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _bech32_decode(text: str) -> tuple[str, list[int], int]:
    if len(text) > 90:
        raise ValueError("bech32 string too long")
    if any(not 33 <= ord(c) <= 126 for c in text):
        raise ValueError("invalid character in bech32 string")
    if text.lower() != text and text.upper() != text:
        raise ValueError("mixed-case bech32 string")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise ValueError("invalid bech32 separator position")
    hrp = text[:pos]
    data = []
    for c in text[pos + 1 :]:
        index = _BECH32_CHARSET.find(c)
        if index < 0:
            raise ValueError(f"invalid bech32 character: {c}")
        data.append(index)
    const = _polymod(_hrp_expand(hrp) + data)
    if const not in (_BECH32_CONST, _BECH32M_CONST):
        raise ValueError("invalid bech32 checksum")
    return hrp, data[:-6], const


def _bech32_encode(hrp: str, data: list[int], const: int) -> str:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ const
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_BECH32_CHARSET[d] for d in data + checksum)


def _convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out = []
    max_value = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & max_value)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or (acc << (to_bits - bits)) & max_value:
        raise ValueError("invalid padding in bech32 data")
    return out


# Base58Check

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_PREFIXES = {
    0: ("bitcoin", "p2pkh"),
    5: ("bitcoin", "p2sh"),
    111: ("testnet", "p2pkh"),
    196: ("testnet", "p2sh"),
}


def _sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def _base58check_decode(text: str) -> bytes:
    number = 0
    for c in text:
        index = _BASE58_ALPHABET.find(c)
        if index < 0:
            raise ValueError(f"invalid base58 character: {c}")
        number = number * 58 + index
    zeros = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    data = b"\x00" * zeros + body
    if len(data) < 4:
        raise ValueError("base58 data too short")
    payload, checksum = data[:-4], data[-4:]
    if _sha256d(payload)[:4] != checksum:
        raise ValueError("invalid base58 checksum")
    return payload


def _base58check_encode(payload: bytes) -> str:
    data = payload + _sha256d(payload)[:4]
    number = int.from_bytes(data, "big")
    chars = []
    while number:
        number, remainder = divmod(number, 58)
        chars.append(_BASE58_ALPHABET[remainder])
    zeros = len(data) - len(data.lstrip(b"\x00"))
    return "1" * zeros + "".join(reversed(chars))


@dataclass(frozen=True)
class Address:
    """A Bitcoin address: segwit (bech32/bech32m) or legacy base58 p2pkh/p2sh."""

    network: str
    kind: str
    data: bytes
    witness_version: int | None = None

    def __str__(self) -> str:
        if self.kind == "segwit":
            version = self.witness_version or 0
            const = _BECH32_CONST if version == 0 else _BECH32M_CONST
            values = [version] + _convert_bits(self.data, 8, 5, True)
            return _bech32_encode(_NETWORK_HRPS[self.network], values, const)
        mainnet = self.network == "bitcoin"
        if self.kind == "p2pkh":
            prefix = 0 if mainnet else 111
        else:
            prefix = 5 if mainnet else 196
        return _base58check_encode(bytes([prefix]) + self.data)

    @classmethod
    def parse(cls, text: str) -> "Address":
        sep = text.rfind("1")
        prefix = text if sep < 0 else text[:sep]
        network = _HRP_NETWORKS.get(prefix) if prefix in (
            "bc", "BC", "tb", "TB", "bcrt", "BCRT"
        ) else None
        if prefix in ("BC", "TB", "BCRT"):
            network = _HRP_NETWORKS[prefix.lower()]
        if network is not None:
            return cls._parse_segwit(text, network)
        return cls._parse_base58(text)

    @classmethod
    def _parse_segwit(cls, text: str, network: str) -> "Address":
        _, data, const = _bech32_decode(text)
        if not data:
            raise ValueError("empty bech32 payload")
        version = data[0]
        if version > 16:
            raise ValueError(f"invalid witness version: {version}")
        program = bytes(_convert_bits(data[1:], 5, 8, False))
        if not 2 <= len(program) <= 40:
            raise ValueError(f"invalid witness program length: {len(program)}")
        if version == 0 and len(program) not in (20, 32):
            raise ValueError(f"invalid segwit v0 program length: {len(program)}")
        expected = _BECH32_CONST if version == 0 else _BECH32M_CONST
        if const != expected:
            raise ValueError("invalid bech32 variant for witness version")
        return cls(network, "segwit", program, version)

    @classmethod
    def _parse_base58(cls, text: str) -> "Address":
        if len(text) > 50:
            raise ValueError(f"invalid base58 address length: {len(text)}")
        payload = _base58check_decode(text)
        if len(payload) != 21:
            raise ValueError(f"invalid base58 payload length: {len(payload)}")
        try:
            network, kind = _BASE58_PREFIXES[payload[0]]
        except KeyError:
            raise ValueError(f"invalid address version byte: {payload[0]}") from None
        return cls(network, kind, payload[1:])


_DENOMINATIONS = {
    "BTC": 8,
    "btc": 8,
    "mBTC": 5,
    "mbtc": 5,
    "uBTC": 2,
    "ubtc": 2,
    "nBTC": -1,
    "nbtc": -1,
    "pBTC": -4,
    "pbtc": -4,
    "bits": 2,
    "BITS": 2,
    "satoshi": 0,
    "sat": 0,
    "SATOSHI": 0,
    "SAT": 0,
    "msat": -3,
    "MSAT": -3,
}
_AMOUNT_VALUE = re.compile(r"[0-9]*\.?[0-9]*")


@dataclass(frozen=True, order=True)
class Amount:
    """An amount of bitcoin, held in sats."""

    sats: int

    def __str__(self) -> str:
        whole, fraction = divmod(self.sats, 100_000_000)
        return f"{whole}.{fraction:08d} BTC"

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """Parse ``"<value> <denomination>"``, for example ``"1.5 btc"``."""
        parts = text.split(" ", 2)
        if len(parts) != 2:
            raise ValueError("invalid amount format")
        value_text, denomination = parts
        if denomination not in _DENOMINATIONS:
            raise ValueError(f"unknown denomination: {denomination}")
        if not value_text:
            raise ValueError("invalid amount format")
        if value_text.startswith("-"):
            raise ValueError("amount is negative")
        if len(value_text) > 50:
            raise ValueError("amount input too large")
        if not _AMOUNT_VALUE.fullmatch(value_text):
            raise ValueError("invalid character in amount")
        try:
            value = Decimal(value_text) if value_text != "." else Decimal(0)
        except InvalidOperation:
            raise ValueError("invalid amount format") from None
        sats = value.scaleb(_DENOMINATIONS[denomination])
        if sats != sats.to_integral_value():
            raise ValueError("amount too precise")
        if sats > _U64_MAX:
            raise ValueError("amount too big")
        return cls(int(sats))


@dataclass(frozen=True)
class Object:
    """A parsed command-line object, tagged with its kind."""

    kind: str
    value: object

    ADDRESS = "address"
    HASH = "hash"
    INSCRIPTION_ID = "inscription_id"
    INTEGER = "integer"
    OUTPOINT = "outpoint"
    SAT = "sat"
    SATPOINT = "satpoint"

    def __str__(self) -> str:
        if self.kind == Object.HASH:
            return self.value.hex()
        return str(self.value)


def _parse_u128(text: str) -> int:
    if not text:
        raise ValueError("cannot parse integer from empty string")
    value = int(text)
    if value > _U128_MAX:
        raise ValueError("number too large to fit in target type")
    return value


def parse_object(text: str) -> Object:
    """Recognise the form of ``text`` and parse it into an Object."""
    representation = Representation.classify(text)
    if representation is Representation.ADDRESS:
        return Object(Object.ADDRESS, Address.parse(text))
    if representation in (
        Representation.DECIMAL,
        Representation.DEGREE,
        Representation.PERCENTILE,
        Representation.NAME,
    ):
        return Object(Object.SAT, Sat.parse(text))
    if representation is Representation.HASH:
        return Object(Object.HASH, bytes.fromhex(text))
    if representation is Representation.INSCRIPTION_ID:
        return Object(Object.INSCRIPTION_ID, InscriptionId.parse(text))
    if representation is Representation.INTEGER:
        return Object(Object.INTEGER, _parse_u128(text))
    if representation is Representation.OUT_POINT:
        return Object(Object.OUTPOINT, OutPoint.parse(text))
    return Object(Object.SATPOINT, SatPoint.parse(text))


@dataclass(frozen=True)
class Outgoing:
    """What to send: an amount, an inscription or a specific sat point."""

    kind: str
    value: object

    AMOUNT = "amount"
    INSCRIPTION_ID = "inscription_id"
    SAT_POINT = "satpoint"

    def __str__(self) -> str:
        return str(self.value)


def parse_outgoing(text: str) -> Outgoing:
    """Parse an outgoing specification: sat point, inscription id or amount."""
    if ":" in text:
        return Outgoing(Outgoing.SAT_POINT, SatPoint.parse(text))
    if len(text.encode("utf-8")) >= 66:
        return Outgoing(Outgoing.INSCRIPTION_ID, InscriptionId.parse(text))
    if " " in text:
        return Outgoing(Outgoing.AMOUNT, Amount.parse(text))
    index = next((i for i, c in enumerate(text) if c.isalpha()), None)
    if index is not None:
        text = f"{text[:index]} {text[index:]}"
    return Outgoing(Outgoing.AMOUNT, Amount.parse(text))