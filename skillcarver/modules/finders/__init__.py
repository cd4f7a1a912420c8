from .tar_parser import EntryKind, TarEntry, parse_tar_header, read_octal, read_string, is_zero_block
from .peekers import ArchivePeekResult, gunzip, iter_tar_entries, peek_archive
