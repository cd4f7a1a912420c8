"""skillcarver: pull agent skills out of GitHub tarballs without tarfile."""

from skillcarver.modules.errors import ArchiveError, FetchError, SkillcarverError
from skillcarver.modules.finders.tar_parser import EntryKind, TarEntry
from skillcarver.modules.keepers.extractor import ExtractOptions, extract, extract_tar_gz

__version__ = "0.1.0"

__all__ = [
    "ArchiveError",
    "EntryKind",
    "ExtractOptions",
    "FetchError",
    "SkillcarverError",
    "TarEntry",
    "extract",
    "extract_tar_gz",
]
