"""Terminal prompt building blocks: a select list model and a searchable file browser."""

__version__ = "0.1.0"
__all__ = ["browser", "entries", "globbing", "paths", "select"]