"""Utility modules for Sentipulse."""

from .data_prep import export_to_json, export_comments_csv, load_exported_analysis, prepare_export

__all__ = [
    "export_to_json",
    "export_comments_csv",
    "load_exported_analysis",
    "prepare_export",
]
