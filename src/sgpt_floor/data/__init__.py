"""Data loading utilities."""

from .catalog_loader import import_catalog, load_catalog, load_program_file

__all__ = ["import_catalog", "load_catalog", "load_program_file"]
