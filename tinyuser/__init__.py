"""Unix-style tools, a file-system image builder, a page-table model, a shell parser and helpers for a teaching operating system."""

__version__ = "0.1.0"