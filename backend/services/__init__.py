"""
Services package
"""
from services.profiler import (
    ColumnType,
    analyze_rows,
    build_histogram,
    column_histogram,
    compute_statistics,
    generate_insights,
    infer_column_types,
    parse_number,
)
from services.data_formats import DataReader, DataFormat, ReadOptions, read_records, load_records

__all__ = [
    "ColumnType",
    "analyze_rows",
    "build_histogram",
    "column_histogram",
    "compute_statistics",
    "generate_insights",
    "infer_column_types",
    "parse_number",
    "DataReader",
    "DataFormat",
    "ReadOptions",
    "read_records",
    "load_records",
]
