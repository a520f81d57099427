"""
CSV Analyzer Data Format Handlers

Turns uploaded files into records (one dict per row) for the profiler:
- CSV / TSV (spreadsheet and bank exports)
- JSON / JSONL (API exports)
- Parquet (columnar)

Polars does the lenient typing: numbers come back as numbers, true/false as
booleans, empty cells as null. Everything else stays text, dates included,
so the profiler decides what counts as a date. JSON arrays skip polars and
keep the types they were written with.
"""
import io
import json
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from enum import Enum
from dataclasses import dataclass

import polars as pl
from loguru import logger


class DataFormat(str, Enum):
    """Supported data formats"""
    CSV = "csv"
    TSV = "tsv"
    PARQUET = "parquet"
    JSON = "json"
    JSON_LINES = "jsonl"


# File extension to format mapping
EXTENSION_MAP = {
    ".csv": DataFormat.CSV,
    ".txt": DataFormat.CSV,  # Assume CSV for .txt
    ".tsv": DataFormat.TSV,
    ".parquet": DataFormat.PARQUET,
    ".pq": DataFormat.PARQUET,
    ".json": DataFormat.JSON,
    ".jsonl": DataFormat.JSON_LINES,
    ".ndjson": DataFormat.JSON_LINES,
}


@dataclass
class ReadOptions:
    """Options for reading data files"""
    # CSV options
    delimiter: Optional[str] = None  # Auto-detect if None
    has_header: bool = True
    encoding: str = "utf8"
    null_values: List[str] = None
    infer_schema_length: Optional[int] = None  # None = scan all rows for accurate type inference
    ignore_errors: bool = True  # Ignore parsing errors for mixed types and edge cases

    # Sampling
    sample_rows: Optional[int] = None  # Read only N rows

    def __post_init__(self):
        if self.null_values is None:
            self.null_values = [""]


class DataReader:
    """
    Data file reader with format auto-detection.

    Uses Polars for fast, memory-efficient reading.
    """

    @staticmethod
    def detect_format(file_path: Union[str, Path]) -> DataFormat:
        """Detect file format from extension"""
        ext = Path(file_path).suffix.lower()
        if ext in EXTENSION_MAP:
            return EXTENSION_MAP[ext]
        raise ValueError(f"Unsupported file format: {ext}")

    @staticmethod
    def detect_csv_delimiter(sample: str) -> str:
        """Guess the CSV delimiter from a text sample"""
        delimiters = {
            ",": sample.count(","),
            ";": sample.count(";"),
            "\t": sample.count("\t"),
            "|": sample.count("|"),
        }
        # Ties resolve to the first entry, so a single-column file reads as CSV
        return max(delimiters, key=delimiters.get)

    @classmethod
    def read_bytes(
        cls,
        content: bytes,
        filename: str,
        options: Optional[ReadOptions] = None
    ) -> pl.DataFrame:
        """Read from bytes (for uploaded files)"""
        options = options or ReadOptions()
        format_type = cls.detect_format(filename)

        readers = {
            DataFormat.CSV: cls._read_csv,
            DataFormat.TSV: cls._read_tsv,
            DataFormat.PARQUET: cls._read_parquet,
            DataFormat.JSON: cls._read_json,
            DataFormat.JSON_LINES: cls._read_jsonl,
        }
        df = readers[format_type](content, options)

        # Apply sampling if requested
        if options.sample_rows and len(df) > options.sample_rows:
            df = df.head(options.sample_rows)

        logger.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")
        return df

    @classmethod
    def _read_csv(cls, content: bytes, options: ReadOptions) -> pl.DataFrame:
        """Read CSV content"""
        delimiter = options.delimiter or cls.detect_csv_delimiter(
            content[:8192].decode("utf-8", errors="ignore")
        )
        return cls._read_delimited(content, delimiter, options)

    @classmethod
    def _read_tsv(cls, content: bytes, options: ReadOptions) -> pl.DataFrame:
        """Read TSV content"""
        return cls._read_delimited(content, "\t", options)

    @staticmethod
    def _read_delimited(content: bytes, delimiter: str, options: ReadOptions) -> pl.DataFrame:
        return pl.read_csv(
            io.BytesIO(content),
            separator=delimiter,
            has_header=options.has_header,
            encoding=options.encoding,
            null_values=options.null_values,
            n_rows=options.sample_rows,
            infer_schema_length=options.infer_schema_length,
            ignore_errors=options.ignore_errors,
        )

    @classmethod
    def _read_parquet(cls, content: bytes, options: ReadOptions) -> pl.DataFrame:
        """Read Parquet content"""
        return pl.read_parquet(io.BytesIO(content))

    @staticmethod
    def parse_json(content: bytes) -> List[Dict[str, Any]]:
        """
        Parse a JSON array of objects (or a single object) into records.

        Values keep their JSON types, so a column mixing numbers, text and
        booleans is not flattened to strings.
        """
        data = json.loads(content.decode("utf-8"))
        rows = data if isinstance(data, list) else [data]
        if not all(isinstance(row, dict) for row in rows):
            raise ValueError("JSON rows must be objects")
        return rows

    @classmethod
    def _read_json(cls, content: bytes, options: ReadOptions) -> pl.DataFrame:
        """Read JSON content"""
        return pl.DataFrame(
            cls.parse_json(content), infer_schema_length=options.infer_schema_length, strict=False
        )

    @classmethod
    def _read_jsonl(cls, content: bytes, options: ReadOptions) -> pl.DataFrame:
        """Read newline-delimited JSON"""
        return pl.read_ndjson(io.BytesIO(content))


def to_records(df: pl.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame to row records in column order"""
    return df.to_dicts()


def read_records(
    content: bytes,
    filename: str,
    options: Optional[ReadOptions] = None
) -> List[Dict[str, Any]]:
    """Parse uploaded bytes straight into records"""
    if DataReader.detect_format(filename) == DataFormat.JSON:
        options = options or ReadOptions()
        records = DataReader.parse_json(content)
        if options.sample_rows:
            records = records[:options.sample_rows]
        logger.info(f"Loaded {len(records):,} JSON records")
        return records
    return to_records(DataReader.read_bytes(content, filename, options))


def load_records(path: Union[str, Path], **kwargs) -> List[Dict[str, Any]]:
    """Convenience function to read a local file into records"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    logger.info(f"Reading file: {path.name}")
    return read_records(path.read_bytes(), path.name, ReadOptions(**kwargs))
