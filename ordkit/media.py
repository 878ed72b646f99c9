"""Content types, the media kinds they render as, and file extension lookup."""

from __future__ import annotations

import enum
import io
import os
import struct
from pathlib import Path
from typing import BinaryIO, Iterator


class Media(enum.Enum):
    AUDIO = "audio"
    IFRAME = "iframe"
    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"
    UNKNOWN = "unknown"
    VIDEO = "video"

    @classmethod
    def from_content_type(cls, content_type: str) -> "Media":
        for entry_type, media, _ in _TABLE:
            if entry_type == content_type:
                return media
        raise ValueError(f"unknown content type: {content_type}")


_TABLE: tuple[tuple[str, Media, tuple[str, ...]], ...] = (
    ("application/json", Media.TEXT, ("json",)),
    ("application/pdf", Media.PDF, ("pdf",)),
    ("application/pgp-signature", Media.TEXT, ("asc",)),
    ("application/yaml", Media.TEXT, ("yaml", "yml")),
    ("audio/flac", Media.AUDIO, ("flac",)),
    ("audio/mpeg", Media.AUDIO, ("mp3",)),
    ("audio/wav", Media.AUDIO, ("wav",)),
    ("image/apng", Media.IMAGE, ("apng",)),
    ("image/avif", Media.IMAGE, ()),
    ("image/gif", Media.IMAGE, ("gif",)),
    ("image/jpeg", Media.IMAGE, ("jpg", "jpeg")),
    ("image/png", Media.IMAGE, ("png",)),
    ("image/svg+xml", Media.IFRAME, ("svg",)),
    ("image/webp", Media.IMAGE, ("webp",)),
    ("model/gltf-binary", Media.UNKNOWN, ("glb",)),
    ("model/stl", Media.UNKNOWN, ("stl",)),
    ("text/css", Media.TEXT, ("css",)),
    ("text/html;charset=utf-8", Media.IFRAME, ("html",)),
    ("text/javascript", Media.TEXT, ("js",)),
    ("text/plain;charset=utf-8", Media.TEXT, ("txt",)),
    ("text/markdown;charset=utf-8", Media.TEXT, ("md",)),
    ("video/mp4", Media.VIDEO, ("mp4",)),
    ("video/webm", Media.VIDEO, ("webm",)),
)


def _extension(path: Path) -> str | None:
    name = path.name
    if not name or name == "..":
        return None
    before, dot, after = name.rpartition(".")
    if not dot or not before:
        return None
    return after


def content_type_for_path(path: str | os.PathLike) -> str:
    """Content type for a file, chosen by its extension."""
    path = Path(path)
    extension = _extension(path)
    if extension is None:
        raise ValueError("file must have extension")
    extension = extension.lower()

    if extension == "mp4":
        check_mp4_codec(path)

    for content_type, _, extensions in _TABLE:
        if extension in extensions:
            return content_type

    supported = sorted(extensions[0] for _, _, extensions in _TABLE if extensions)
    raise ValueError(
        f"unsupported file extension `.{extension}`, supported extensions: {' '.join(supported)}"
    )


# MP4 box parsing

_TRACK_TYPES = {b"vide": "video", b"soun": "audio", b"sbtl": "subtitle"}
_CODECS = (
    (b"avc1", "h264"),
    (b"hev1", "h265"),
    (b"vp09", "vp9"),
    (b"mp4a", "aac"),
    (b"tx3g", "ttxt"),
)


def _boxes(stream: BinaryIO, size: int) -> Iterator[tuple[bytes, int, int]]:
    """Yield (type, payload offset, payload length) for each box in the stream."""
    offset = 0
    while offset + 8 <= size:
        stream.seek(offset)
        box_size, kind = struct.unpack(">I4s", stream.read(8))
        header_len = 8
        if box_size == 1:
            large = stream.read(8)
            if len(large) != 8:
                raise ValueError("truncated box header")
            (box_size,) = struct.unpack(">Q", large)
            header_len = 16
        elif box_size == 0:
            box_size = size - offset
        if box_size < header_len or offset + box_size > size:
            raise ValueError(f"invalid size for {kind!r} box")
        yield kind, offset + header_len, box_size - header_len
        offset += box_size


def _children(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    stream = io.BytesIO(data)
    for kind, start, length in _boxes(stream, len(data)):
        yield kind, data[start : start + length]


def _child(data: bytes, kind: bytes) -> bytes:
    for child_kind, payload in _children(data):
        if child_kind == kind:
            return payload
    raise ValueError(f"{kind.decode('ascii')} box not found")


def _track_type(mdia: bytes) -> str:
    hdlr = _child(mdia, b"hdlr")
    if len(hdlr) < 12:
        raise ValueError("hdlr box too short")
    handler = hdlr[8:12]
    try:
        return _TRACK_TYPES[handler]
    except KeyError:
        raise ValueError(f"unsupported track type: {handler!r}") from None


def _media_type(mdia: bytes) -> str:
    stsd = _child(_child(_child(mdia, b"minf"), b"stbl"), b"stsd")
    if len(stsd) < 8:
        raise ValueError("stsd box too short")
    entries = {kind for kind, _ in _children(stsd[8:])}
    for fourcc, name in _CODECS:
        if fourcc in entries:
            return name
    raise ValueError("stsd box not found")


def check_mp4_codec(path: str | os.PathLike) -> None:
    """Raise ValueError unless every video track in the MP4 file is H.264."""
    with open(path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        found: dict[bytes, bytes] = {}
        for kind, start, length in _boxes(f, size):
            if kind == b"ftyp" and kind not in found:
                found[kind] = b""
            elif kind == b"moov" and kind not in found:
                f.seek(start)
                found[kind] = f.read(length)
    if b"ftyp" not in found:
        raise ValueError("ftyp box not found")
    if b"moov" not in found:
        raise ValueError("moov box not found")

    for kind, trak in _children(found[b"moov"]):
        if kind != b"trak":
            continue
        mdia = _child(trak, b"mdia")
        if _track_type(mdia) == "video":
            media_type = _media_type(mdia)
            if media_type != "h264":
                raise ValueError(
                    f"Unsupported video codec, only H.264 is supported in MP4: {media_type}"
                )