from .formatters import Tee, format_entry_line, human_readable_size

__all__ = ['Tee', 'format_entry_line', 'human_readable_size']
