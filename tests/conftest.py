"""Helpers for building USTAR archives byte by byte."""

import gzip

import pytest

BLOCK = 512


def _put(header: bytearray, offset: int, value: bytes, length: int):
    value = value[:length]
    header[offset:offset + len(value)] = value


def make_header(
    name: str,
    size: int = 0,
    typeflag: bytes = b"0",
    linkname: str = "",
    prefix: str = "",
    magic: bytes = b"ustar\x00",
    size_field: bytes = None,
    mode: int = 0o644,
) -> bytes:
    header = bytearray(BLOCK)
    _put(header, 0, name.encode(), 100)
    _put(header, 100, b"%07o " % mode, 8)
    _put(header, 108, b"0000000 ", 8)
    _put(header, 116, b"0000000 ", 8)
    _put(header, 124, size_field if size_field is not None else b"%011o " % size, 12)
    _put(header, 136, b"%011o " % 1700000000, 12)
    _put(header, 148, b" " * 8, 8)
    header[156:157] = typeflag
    _put(header, 157, linkname.encode(), 100)
    _put(header, 257, magic, 6)
    _put(header, 263, b"00", 2)
    _put(header, 345, prefix.encode(), 155)
    checksum = sum(header)
    _put(header, 148, b"%06o\x00 " % checksum, 8)
    return bytes(header)


def make_tar(entries, end_marker: bool = True) -> bytes:
    """
    Build an uncompressed tar stream.

    Each entry is a dict with "name" and optional "content" (str or bytes),
    "type" ("file", "dir", "symlink" or a raw typeflag byte), "linkname",
    "prefix" and "magic". A raw bytes item is appended verbatim.
    """
    blocks = []
    for entry in entries:
        if isinstance(entry, bytes):
            blocks.append(entry)
            continue
        content = entry.get("content", b"")
        if isinstance(content, str):
            content = content.encode()
        kind = entry.get("type", "file")
        typeflag = {"file": b"0", "dir": b"5", "symlink": b"2"}.get(kind, kind)
        blocks.append(make_header(
            entry["name"],
            size=len(content),
            typeflag=typeflag,
            linkname=entry.get("linkname", ""),
            prefix=entry.get("prefix", ""),
            magic=entry.get("magic", b"ustar\x00"),
            mode=0o755 if kind == "dir" else 0o644,
        ))
        if content:
            padding = -len(content) % BLOCK
            blocks.append(content + b"\x00" * padding)
    if end_marker:
        blocks.append(b"\x00" * BLOCK * 2)
    return b"".join(blocks)


def make_tar_gz(entries, end_marker: bool = True) -> bytes:
    return gzip.compress(make_tar(entries, end_marker=end_marker))


@pytest.fixture
def tar_gz():
    return make_tar_gz


@pytest.fixture
def raw_tar():
    return make_tar


@pytest.fixture
def header():
    return make_header
