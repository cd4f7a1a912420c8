# tar_parser.py
# Manual USTAR header parser for in-memory skill tarballs
#
# Parses 512-byte tar headers from decompressed data to produce entry
# descriptors without going through the tarfile module.

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


# =============================================================================
# USTAR Layout
# =============================================================================

BLOCK_SIZE = 512

# Field offsets and widths (POSIX.1-1988)
OFFSET_NAME, LENGTH_NAME = 0, 100
OFFSET_MODE, LENGTH_MODE = 100, 8
OFFSET_UID, LENGTH_UID = 108, 8
OFFSET_GID, LENGTH_GID = 116, 8
OFFSET_SIZE, LENGTH_SIZE = 124, 12
OFFSET_MTIME, LENGTH_MTIME = 136, 12
OFFSET_TYPEFLAG = 156
OFFSET_LINKNAME, LENGTH_LINKNAME = 157, 100
OFFSET_MAGIC, LENGTH_MAGIC = 257, 6
OFFSET_PREFIX, LENGTH_PREFIX = 345, 155

USTAR_MAGIC = "ustar"

# Type flags
TYPE_FILE = "0"
TYPE_FILE_ALT = "\x00"  # pre-POSIX writers used a null byte for files
TYPE_SYMLINK = "2"
TYPE_DIRECTORY = "5"


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass
class TarEntry:
    """A single tar archive entry."""
    name: str
    size: int
    kind: EntryKind
    linkname: Optional[str] = None  # only set for symlinks
    # Extra header fields, used for ls -la style listings
    typeflag: str = TYPE_FILE
    mode: int = 0
    uid: int = 0
    gid: int = 0
    mtime: int = 0

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind is EntryKind.SYMLINK

    @property
    def padded_size(self) -> int:
        """Size of the payload region, rounded up to the block boundary."""
        return padded_size(self.size)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "size": self.size,
            "kind": self.kind.value,
            "linkname": self.linkname,
            "typeflag": self.typeflag,
            "mode": mode_to_string(self.mode, self.kind),
            "uid": self.uid,
            "gid": self.gid,
            "mtime": format_mtime(self.mtime),
        }


# =============================================================================
# Field Codec
# =============================================================================

def read_string(block: bytes, offset: int, length: int) -> str:
    """
    Read a fixed-width text field.

    The field ends at the first null byte, or at ``length`` if there is none.
    """
    field = block[offset:offset + length]
    end = field.find(b"\x00")
    if end >= 0:
        field = field[:end]
    return field.decode("utf-8", errors="replace")


def read_octal(block: bytes, offset: int, length: int) -> int:
    """
    Read an octal number field.

    Blank or unparseable fields read as 0; tar writers pad these with spaces
    and nulls and some leave them empty for zero-sized entries.
    """
    text = read_string(block, offset, length).strip()
    if not text:
        return 0
    try:
        value = int(text, 8)
    except ValueError:
        return 0
    return value if value >= 0 else 0


def padded_size(size: int) -> int:
    """Round a payload size up to a whole number of blocks."""
    return (size + BLOCK_SIZE - 1) // BLOCK_SIZE * BLOCK_SIZE


# =============================================================================
# Header Parsing
# =============================================================================

def _kind_for_typeflag(typeflag: str) -> EntryKind:
    if typeflag == TYPE_DIRECTORY:
        return EntryKind.DIRECTORY
    if typeflag == TYPE_SYMLINK:
        return EntryKind.SYMLINK
    # '0', the legacy null byte, and every unknown flag extract as files
    return EntryKind.FILE


def parse_tar_header(block: bytes) -> Optional[TarEntry]:
    """
    Parse one 512-byte USTAR header block.

    Returns None when the block is not a USTAR header (short block or
    missing "ustar" magic). Malformed numeric fields never raise; they
    read as 0.

    Tar header structure (POSIX ustar):
    - 0-99: filename (100 bytes, null-terminated)
    - 100-107: mode (8 bytes octal)
    - 108-115: uid (8 bytes octal)
    - 116-123: gid (8 bytes octal)
    - 124-135: size (12 bytes octal)
    - 136-147: mtime (12 bytes octal)
    - 156: typeflag (1 byte)
    - 157-256: linkname (100 bytes)
    - 257-262: magic "ustar\\0" or "ustar " (6 bytes)
    - 345-499: prefix (155 bytes, for long filenames)
    """
    if len(block) < BLOCK_SIZE:
        return None

    magic = read_string(block, OFFSET_MAGIC, LENGTH_MAGIC)
    if not magic.startswith(USTAR_MAGIC):
        return None

    name = read_string(block, OFFSET_NAME, LENGTH_NAME)
    prefix = read_string(block, OFFSET_PREFIX, LENGTH_PREFIX)
    if prefix:
        name = f"{prefix}/{name}"

    typeflag = chr(block[OFFSET_TYPEFLAG])
    kind = _kind_for_typeflag(typeflag)

    linkname = None
    if kind is EntryKind.SYMLINK:
        linkname = read_string(block, OFFSET_LINKNAME, LENGTH_LINKNAME)

    return TarEntry(
        name=name,
        size=read_octal(block, OFFSET_SIZE, LENGTH_SIZE),
        kind=kind,
        linkname=linkname,
        typeflag=typeflag,
        mode=read_octal(block, OFFSET_MODE, LENGTH_MODE),
        uid=read_octal(block, OFFSET_UID, LENGTH_UID),
        gid=read_octal(block, OFFSET_GID, LENGTH_GID),
        mtime=read_octal(block, OFFSET_MTIME, LENGTH_MTIME),
    )


# =============================================================================
# End-of-Archive Detection
# =============================================================================

def is_zero_block(block: bytes) -> bool:
    """True if every byte of the block is zero (an empty block counts)."""
    return block.count(0) == len(block)


def is_end_of_archive(data: bytes, offset: int) -> bool:
    """
    Check for the end-of-archive marker at ``offset``.

    The marker is two consecutive zero blocks. A missing second block
    (end of buffer) counts as zero.
    """
    if not is_zero_block(data[offset:offset + BLOCK_SIZE]):
        return False
    following = data[offset + BLOCK_SIZE:offset + 2 * BLOCK_SIZE]
    return is_zero_block(following)


# =============================================================================
# Display Helpers
# =============================================================================

def mode_to_string(mode_int: int, kind: EntryKind) -> str:
    """
    Convert octal mode to ls-style permission string.

    Examples:
        0o755, DIRECTORY -> 'drwxr-xr-x'
        0o644, FILE -> '-rw-r--r--'
        0o777, SYMLINK -> 'lrwxrwxrwx'
    """
    type_char = {
        EntryKind.DIRECTORY: "d",
        EntryKind.SYMLINK: "l",
    }.get(kind, "-")

    perms = ""
    for shift in [6, 3, 0]:  # owner, group, other
        bits = (mode_int >> shift) & 0o7
        perms += "r" if bits & 4 else "-"
        perms += "w" if bits & 2 else "-"
        perms += "x" if bits & 1 else "-"

    return type_char + perms


def format_mtime(unix_timestamp: int) -> str:
    """Format Unix timestamp to 'YYYY-MM-DD HH:MM' string."""
    try:
        if unix_timestamp <= 0:
            return "----.--.-- --:--"
        dt = datetime.fromtimestamp(unix_timestamp)
        return dt.strftime("%Y-%m-%d %H:%M")
    except (OSError, ValueError, OverflowError):
        return "----.--.-- --:--"
