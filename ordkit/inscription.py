"""Inscription envelopes: building reveal scripts and extracting inscriptions from witnesses."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator

from ordkit.media import Media, content_type_for_path

OP_FALSE = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_IF = 0x63
OP_ENDIF = 0x68
OP_CHECKSIG = 0xAC

TAPROOT_ANNEX_PREFIX = 0x50
MAX_PUSH_SIZE = 520

PROTOCOL_ID = b"ord"
BODY_TAG = b""
CONTENT_TYPE_TAG = b"\x01"


class InscriptionError(Exception):
    """Raised when a witness holds no parsable inscription envelope."""

    EMPTY_WITNESS = "empty witness"
    INVALID_INSCRIPTION = "invalid inscription"
    KEY_PATH_SPEND = "key path spend"
    SCRIPT = "script"
    UNRECOGNIZED_EVEN_FIELD = "unrecognized even field"

    def __init__(self, kind: str, message: str | None = None) -> None:
        super().__init__(message or kind)
        self.kind = kind


class ScriptError(InscriptionError):
    """Raised when a script cannot be split into instructions."""

    EARLY_END_OF_SCRIPT = "early end of script"

    def __init__(self, reason: str) -> None:
        super().__init__(InscriptionError.SCRIPT, f"script error: {reason}")
        self.reason = reason


@dataclass(frozen=True)
class Instruction:
    """A script instruction: either a data push or a bare opcode."""

    data: bytes | None = None
    opcode: int | None = None

    @classmethod
    def push(cls, data: bytes) -> "Instruction":
        return cls(data=bytes(data))

    @classmethod
    def op(cls, opcode: int) -> "Instruction":
        return cls(opcode=opcode)

    @property
    def is_push(self) -> bool:
        return self.data is not None


_ENDIF = Instruction.op(OP_ENDIF)
_ENVELOPE_HEADER = (
    Instruction.push(b""),  # OP_FALSE
    Instruction.op(OP_IF),
    Instruction.push(PROTOCOL_ID),
)


def parse_instructions(script: bytes) -> Iterator[Instruction]:
    """Yield the instructions of a script, raising ScriptError if it is truncated."""
    script = bytes(script)
    end = len(script)
    pos = 0
    while pos < end:
        opcode = script[pos]
        pos += 1
        if opcode < OP_PUSHDATA1:
            size = opcode
        elif opcode in (OP_PUSHDATA1, OP_PUSHDATA2, OP_PUSHDATA4):
            width = {OP_PUSHDATA1: 1, OP_PUSHDATA2: 2, OP_PUSHDATA4: 4}[opcode]
            if pos + width > end:
                raise ScriptError(ScriptError.EARLY_END_OF_SCRIPT)
            size = int.from_bytes(script[pos : pos + width], "little")
            pos += width
        else:
            yield Instruction.op(opcode)
            continue
        if pos + size > end:
            raise ScriptError(ScriptError.EARLY_END_OF_SCRIPT)
        yield Instruction.push(script[pos : pos + size])
        pos += size


class ScriptBuilder:
    """Accumulates opcodes and data pushes into a script."""

    def __init__(self) -> None:
        self._script = bytearray()

    def push_opcode(self, opcode: int) -> "ScriptBuilder":
        if not 0 <= opcode <= 0xFF:
            raise ValueError(f"opcode out of range: {opcode}")
        self._script.append(opcode)
        return self

    def push_slice(self, data: bytes) -> "ScriptBuilder":
        size = len(data)
        if size < OP_PUSHDATA1:
            self._script.append(size)
        elif size < 0x100:
            self._script.append(OP_PUSHDATA1)
            self._script += size.to_bytes(1, "little")
        elif size < 0x10000:
            self._script.append(OP_PUSHDATA2)
            self._script += size.to_bytes(2, "little")
        elif size < 0x100000000:
            self._script.append(OP_PUSHDATA4)
            self._script += size.to_bytes(4, "little")
        else:
            raise ValueError("push too large")
        self._script += data
        return self

    def into_script(self) -> bytes:
        return bytes(self._script)


@dataclass
class TxIn:
    """A transaction input; only its witness matters for inscriptions."""

    witness: list[bytes] = field(default_factory=list)
    previous_output: object = None
    script_sig: bytes = b""
    sequence: int = 0


@dataclass
class Transaction:
    inputs: list[TxIn] = field(default_factory=list)
    outputs: list[object] = field(default_factory=list)
    version: int = 0
    lock_time: int = 0


@dataclass(frozen=True)
class Inscription:
    """Content carried in an envelope: an optional content type and body."""

    content_type: bytes | None = None
    body: bytes | None = None

    @classmethod
    def from_transaction(cls, tx: Transaction) -> list["TransactionInscription"]:
        """All inscriptions in a transaction's inputs, skipping unparsable witnesses."""
        result = []
        for index, tx_in in enumerate(tx.inputs):
            try:
                inscriptions = parse_witness(tx_in.witness)
            except InscriptionError:
                continue
            result.extend(
                TransactionInscription(inscription, index, offset)
                for offset, inscription in enumerate(inscriptions)
            )
        return result

    @classmethod
    def from_file(
        cls, path: str | os.PathLike, content_size_limit: int | None = None
    ) -> "Inscription":
        """Build an inscription from a file, its content type taken from the extension."""
        try:
            with open(path, "rb") as f:
                body = f.read()
        except OSError as err:
            raise OSError(f"io error reading {os.fspath(path)}") from err

        if content_size_limit is not None and len(body) > content_size_limit:
            raise ValueError(
                f"content size of {len(body)} bytes exceeds "
                f"{content_size_limit} byte limit for inscriptions"
            )

        content_type = content_type_for_path(path)
        return cls(content_type=content_type.encode(), body=body)

    def append_reveal_script(self, builder: ScriptBuilder) -> bytes:
        """Append this inscription's envelope to ``builder`` and return the script."""
        builder.push_opcode(OP_FALSE).push_opcode(OP_IF).push_slice(PROTOCOL_ID)
        if self.content_type is not None:
            builder.push_slice(CONTENT_TYPE_TAG).push_slice(self.content_type)
        if self.body is not None:
            builder.push_slice(BODY_TAG)
            for start in range(0, len(self.body), MAX_PUSH_SIZE):
                builder.push_slice(self.body[start : start + MAX_PUSH_SIZE])
        builder.push_opcode(OP_ENDIF)
        return builder.into_script()

    def media(self) -> Media:
        if self.body is None:
            return Media.UNKNOWN
        content_type = self.content_type_text()
        if content_type is None:
            return Media.UNKNOWN
        try:
            return Media.from_content_type(content_type)
        except ValueError:
            return Media.UNKNOWN

    def content_length(self) -> int | None:
        return None if self.body is None else len(self.body)

    def content_type_text(self) -> str | None:
        """The content type as text, or None if absent or not valid UTF-8."""
        if self.content_type is None:
            return None
        try:
            return self.content_type.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def to_witness(self) -> list[bytes]:
        return [self.append_reveal_script(ScriptBuilder()), b""]


@dataclass(frozen=True)
class TransactionInscription:
    inscription: Inscription
    tx_in_index: int
    tx_in_offset: int


class _NoInscription(Exception):
    """The script ran out before another complete envelope was found."""


class _Parser:
    def __init__(self, script: bytes) -> None:
        self._instructions = parse_instructions(script)
        self._buffer: list[Instruction] = []

    def inscriptions(self) -> Iterator[Inscription]:
        while True:
            try:
                yield self._parse_one()
            except _NoInscription:
                return

    def _parse_one(self) -> Inscription:
        while not self._match(_ENVELOPE_HEADER):
            pass

        fields: dict[bytes, bytes] = {}
        while True:
            instruction = self._advance()
            if instruction.data is not None:
                tag = instruction.data
                if tag == BODY_TAG:
                    body = bytearray()
                    while not self._accept(_ENDIF):
                        body += self._expect_push()
                    fields[BODY_TAG] = bytes(body)
                    break
                if tag in fields:
                    raise InscriptionError(InscriptionError.INVALID_INSCRIPTION)
                fields[tag] = self._expect_push()
            elif instruction.opcode == OP_ENDIF:
                break
            else:
                raise InscriptionError(InscriptionError.INVALID_INSCRIPTION)

        body = fields.pop(BODY_TAG, None)
        content_type = fields.pop(CONTENT_TYPE_TAG, None)

        if any(tag and tag[0] % 2 == 0 for tag in fields):
            raise InscriptionError(InscriptionError.UNRECOGNIZED_EVEN_FIELD)

        return Inscription(content_type=content_type, body=body)

    def _peek(self) -> Instruction | None:
        if not self._buffer:
            instruction = next(self._instructions, None)
            if instruction is None:
                return None
            self._buffer.append(instruction)
        return self._buffer[0]

    def _advance(self) -> Instruction:
        instruction = self._buffer.pop() if self._buffer else next(self._instructions, None)
        if instruction is None:
            raise _NoInscription
        return instruction

    def _match(self, expected: tuple[Instruction, ...]) -> bool:
        for instruction in expected:
            if self._advance() != instruction:
                return False
        return True

    def _expect_push(self) -> bytes:
        instruction = self._advance()
        if instruction.data is None:
            raise InscriptionError(InscriptionError.INVALID_INSCRIPTION)
        return instruction.data

    def _accept(self, expected: Instruction) -> bool:
        if self._peek() == expected:
            self._advance()
            return True
        return False


def parse_witness(witness: list[bytes]) -> list[Inscription]:
    """Extract every inscription from a script-path spend witness."""
    if not witness:
        raise InscriptionError(InscriptionError.EMPTY_WITNESS)
    if len(witness) == 1:
        raise InscriptionError(InscriptionError.KEY_PATH_SPEND)

    last = witness[-1]
    annex = bool(last) and last[0] == TAPROOT_ANNEX_PREFIX

    if len(witness) == 2 and annex:
        raise InscriptionError(InscriptionError.KEY_PATH_SPEND)

    script = witness[len(witness) - 1] if annex else witness[len(witness) - 2]
    return list(_Parser(script).inscriptions())