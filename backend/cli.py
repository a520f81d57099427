"""
CSV Analyzer CLI
Profile a local data file and print or save the analysis as JSON
"""
import sys
import argparse
from pathlib import Path

from loguru import logger

from config import settings
from exceptions import AnalysisFailedError, InvalidInputError
from services.analysis_client import get_analyzer
from services.data_formats import load_records

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2


def configure_logging(log_level: str = "INFO"):
    """Configure loguru logging"""
    logger.remove()
    logger.add(sys.stderr, level=log_level, format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CSV Analyzer - profile a tabular data file")
    parser.add_argument("file", type=Path, help="CSV, TSV, JSON, JSONL or Parquet file")
    parser.add_argument(
        "--column", "-c",
        type=str,
        default=None,
        help="Column to draw the histogram for (default: first numeric column)"
    )
    parser.add_argument(
        "--buckets", "-b",
        type=int,
        default=settings.DEFAULT_BUCKETS,
        help=f"Number of histogram buckets (default: {settings.DEFAULT_BUCKETS})"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write the analysis JSON here instead of stdout"
    )
    parser.add_argument(
        "--mode", "-m",
        type=str,
        default=settings.ANALYSIS_MODE,
        choices=["local", "remote"],
        help=f"Where to run the analysis (default: {settings.ANALYSIS_MODE})"
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Analysis service URL for remote mode (e.g., http://localhost:3000)"
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        rows = load_records(args.file)
    except Exception as e:
        logger.error(f"Failed to read {args.file}: {e}")
        return EXIT_INVALID_INPUT

    kwargs = {"base_url": args.url} if args.mode == "remote" and args.url else {}
    analyzer = get_analyzer(args.mode, **kwargs)
    logger.info(f"Analyzing {len(rows)} rows with {analyzer.name} analyzer")

    try:
        result = analyzer.analyze(rows, column=args.column, buckets=args.buckets)
    except InvalidInputError as e:
        logger.error(f"{e.message}: {e.details}")
        return EXIT_INVALID_INPUT
    except AnalysisFailedError as e:
        logger.error(f"{e.message}: {e.details}")
        return EXIT_FAILED

    output = result.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        logger.info(f"Analysis saved to {args.output}")
    else:
        print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
