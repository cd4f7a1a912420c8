from skillcarver.modules.finders.tar_parser import TarEntry, format_mtime, mode_to_string


# split output to file and stdout
class Tee:
    """Duplicate stdout/stderr to a file and the console."""
    def __init__(self, *files):
        self.files = files
    def write(self, data):
        for f in self.files:
            f.write(data)
    def flush(self):
        for f in self.files:
            f.flush()


def human_readable_size(size):
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


#----- Tar format entry
def format_entry_line(entry: TarEntry, show_permissions: bool = True) -> str:
    """
    Format a TarEntry for display, similar to ls -la output.

    Args:
        entry: TarEntry parsed from the archive
        show_permissions: Whether to show full ls -la style output

    Returns:
        Formatted string for display
    """
    if show_permissions:
        # Full ls -la style: drwxr-xr-x  0  0  2024-01-15 10:30  filename
        size_str = human_readable_size(entry.size).rjust(8)
        if entry.is_symlink and entry.linkname:
            name_display = f"{entry.name} -> {entry.linkname}"
        else:
            name_display = entry.name
        mode = mode_to_string(entry.mode, entry.kind)
        return (f"  {mode}  {entry.uid:4d} {entry.gid:4d}  {size_str}  "
                f"{format_mtime(entry.mtime)}  {name_display}")

    # Simple format
    if entry.is_dir:
        return f"  [DIR]  {entry.name}"
    elif entry.is_symlink:
        return f"  [LINK] {entry.name} -> {entry.linkname}"
    else:
        return f"  [FILE] {entry.name} ({human_readable_size(entry.size)})"
