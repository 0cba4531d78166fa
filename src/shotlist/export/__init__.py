"""Terminal outputs: CSV metadata export and ZIP media bundle."""

from shotlist.export.bundle import BundlePackager
from shotlist.export.csv_export import compile_csv, count_rows, format_date

__all__ = ["BundlePackager", "compile_csv", "count_rows", "format_date"]
