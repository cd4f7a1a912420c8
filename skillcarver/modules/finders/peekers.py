import zlib
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from skillcarver.modules.errors import ArchiveError
from skillcarver.modules.finders.tar_parser import (
    BLOCK_SIZE,
    TarEntry,
    is_end_of_archive,
    parse_tar_header,
)


GZIP_MAGIC = b"\x1f\x8b"


# =============================================================================
# Decompression
# =============================================================================

def gunzip(compressed: bytes) -> bytes:
    """
    Decompress a complete gzip stream into memory.

    Concatenated gzip members are decoded back to back, as gzip(1) does.

    Raises:
        ArchiveError: missing gzip magic, corrupt deflate data, or a
            stream that ends before the gzip trailer.
    """
    if len(compressed) < 2 or compressed[0:2] != GZIP_MAGIC:
        raise ArchiveError("Not a gzip file (missing magic bytes)")

    chunks = []
    data = compressed
    while data:
        # 16 + MAX_WBITS tells zlib to expect gzip format
        decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
        try:
            chunks.append(decompressor.decompress(data))
            chunks.append(decompressor.flush())
        except zlib.error as e:
            raise ArchiveError(f"Decompression error: {e}") from e
        if not decompressor.eof:
            raise ArchiveError("Decompression error: truncated gzip stream")
        data = decompressor.unused_data
        if data and data[0:2] != GZIP_MAGIC:
            # trailing padding after the last member
            break

    return b"".join(chunks)


# =============================================================================
# Header Walk
# =============================================================================

def iter_tar_entries(data: bytes) -> Iterator[Tuple[TarEntry, int]]:
    """
    Walk the tar headers in a decompressed buffer.

    Yields (entry, content_offset) pairs, where content_offset is where the
    entry's payload starts. Blocks that are not USTAR headers are skipped
    one at a time. Stops at the end-of-archive marker or end of buffer.
    """
    offset = 0
    while offset < len(data):
        if is_end_of_archive(data, offset):
            break

        entry = parse_tar_header(data[offset:offset + BLOCK_SIZE])
        offset += BLOCK_SIZE
        if entry is None:
            continue

        yield entry, offset
        offset += entry.padded_size


# =============================================================================
# Archive Peek
# =============================================================================

@dataclass
class ArchivePeekResult:
    """Result of listing an archive without extracting it."""
    bytes_compressed: int
    bytes_decompressed: int
    entries_found: int
    entries: List[TarEntry] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "bytes_compressed": self.bytes_compressed,
            "bytes_decompressed": self.bytes_decompressed,
            "entries_found": self.entries_found,
            "entries": [e.to_dict() for e in self.entries],
            "error": self.error,
        }


def peek_archive(compressed: bytes) -> ArchivePeekResult:
    """
    List every entry of a .tar.gz payload, symlinks included.

    Decompression problems are reported on the result instead of raised.
    """
    try:
        data = gunzip(compressed)
    except ArchiveError as e:
        return ArchivePeekResult(
            bytes_compressed=len(compressed),
            bytes_decompressed=0,
            entries_found=0,
            error=e.message,
        )

    entries = [entry for entry, _ in iter_tar_entries(data)]
    return ArchivePeekResult(
        bytes_compressed=len(compressed),
        bytes_decompressed=len(data),
        entries_found=len(entries),
        entries=entries,
    )
