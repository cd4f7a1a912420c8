# path_policy.py
# Decides where (and whether) an archive entry may be written under a
# destination root. Guards against Zip Slip style traversal.

import os
from pathlib import Path
from typing import Optional


def strip_components(name: str, count: int) -> str:
    """
    Strip ``count`` leading path components from an entry name.

    Example: strip=1, "repo-abc123/skills/pdf/SKILL.md" -> "skills/pdf/SKILL.md"

    Returns "" when every component is stripped.
    """
    if count <= 0:
        return name
    parts = name.split("/")
    if count >= len(parts):
        return ""
    return "/".join(parts[count:])


def is_path_safe(target: Path, dest_root: Path) -> bool:
    """
    True if ``target`` resolves to ``dest_root`` or somewhere beneath it.

    Both paths are resolved to canonical absolute form before comparing, so
    ".." segments and existing symlinks are followed first.
    """
    resolved_target = os.fspath(target.resolve())
    resolved_root = os.fspath(dest_root.resolve())
    if resolved_target == resolved_root:
        return True
    # join with "" appends exactly one separator, even for a "/" root
    return resolved_target.startswith(os.path.join(resolved_root, ""))


def resolve_entry_path(name: str, dest_root: Path) -> Optional[Path]:
    """
    Map a (stripped, filtered) entry name to its path under ``dest_root``.

    Returns None for names that must not be written: empty names, absolute
    paths, and anything that escapes the destination root.
    """
    if not name:
        return None
    if os.path.isabs(name):
        return None

    target = dest_root / name
    if not is_path_safe(target, dest_root):
        return None
    return target
