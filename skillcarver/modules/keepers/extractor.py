# extractor.py
# Extracts selected entries of a .tar.gz payload into a destination tree.
#
# The whole archive is decompressed into memory first, then the tar headers
# are walked block by block. Entries pass through the path policy before
# anything touches the filesystem.

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from skillcarver.modules.finders.peekers import gunzip, iter_tar_entries
from skillcarver.modules.finders.tar_parser import EntryKind, TarEntry
from skillcarver.modules.keepers.path_policy import resolve_entry_path, strip_components


EntryFilter = Callable[[TarEntry], bool]


@dataclass(frozen=True)
class ExtractOptions:
    """Options for one extraction call."""
    strip: int = 0  # like tar --strip-components
    filter: Optional[EntryFilter] = None

    def __post_init__(self):
        if self.strip < 0:
            raise ValueError(f"strip must be non-negative, got {self.strip}")


def _apply_policy(
    entry: TarEntry,
    dest_root: Path,
    options: ExtractOptions,
) -> Optional[Tuple[TarEntry, Path]]:
    """
    Strip, filter and place an entry.

    Returns the renamed entry and its target path, or None if the entry
    must be skipped.
    """
    if options.strip > 0:
        name = strip_components(entry.name, options.strip)
        if not name:
            return None
        entry = replace(entry, name=name)

    if options.filter is not None and not options.filter(entry):
        return None

    target = resolve_entry_path(entry.name, dest_root)
    if target is None:
        return None
    return entry, target


def extract(
    compressed: bytes,
    destination: Union[str, Path],
    options: Optional[ExtractOptions] = None,
) -> List[str]:
    """
    Extract a gzip-compressed USTAR archive into ``destination``.

    Bad headers, filtered entries and unsafe paths are skipped silently.
    Symlinks are parsed but never created.

    Args:
        compressed: The .tar.gz bytes
        destination: Destination root, created if missing
        options: Strip/filter settings (default: extract everything)

    Returns:
        Relative names (after stripping) of every directory and file written,
        in archive order.

    Raises:
        ArchiveError: the gzip stream is unusable
        OSError: a directory or file could not be written
    """
    options = options or ExtractOptions()
    data = gunzip(compressed)

    dest_root = Path(destination)
    dest_root.mkdir(parents=True, exist_ok=True)

    extracted: List[str] = []
    for entry, content_offset in iter_tar_entries(data):
        placed = _apply_policy(entry, dest_root, options)
        if placed is None:
            continue
        entry, target = placed

        if entry.kind is EntryKind.DIRECTORY:
            target.mkdir(parents=True, exist_ok=True)
            extracted.append(entry.name)
        elif entry.kind is EntryKind.FILE:
            if target.resolve() == dest_root.resolve():
                # "." or "a/.." style names cannot become files
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data[content_offset:content_offset + entry.size])
            extracted.append(entry.name)
        # EntryKind.SYMLINK: not materialized

    return extracted


def extract_tar_gz(
    tar_gz_path: Union[str, Path],
    destination: Union[str, Path],
    options: Optional[ExtractOptions] = None,
) -> List[str]:
    """Extract a .tar.gz file from disk. See extract()."""
    compressed = Path(tar_gz_path).read_bytes()
    return extract(compressed, destination, options)
