"""
Loading tabular comment data and selecting the columns to analyze.

Supports CSV, Excel (xlsx/xls) and JSON. A JSON file holding an exported
analysis is returned as an ExportedAnalysis instead of rows.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from ..core.constants import ColumnConstants, FileConstants
from ..core.exceptions import ColumnNotFoundError, InvalidAnalysisFileError, UnsupportedFileError
from ..core.models import Dataset, ExportedAnalysis, InputRecord
from ..utils.data_prep import validate_export_dict

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _cell(value: Any) -> Any:
    """Missing cells (None, NaN, empty) and other falsy values read as ''."""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return value or ""


def is_exported_analysis(data: Any) -> bool:
    return isinstance(data, dict) and all(data.get(k) is not None for k in ("metadata", "stats", "comments"))


def _frame_to_dataset(df: pd.DataFrame, source: str) -> Dataset:
    df = df.fillna("")
    df.columns = [str(c) for c in df.columns]
    return Dataset(rows=df.to_dict(orient="records"), columns=list(df.columns), source=source)


def read_csv(path: Union[str, Path]) -> Dataset:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True, encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.warning(f"{path} is not UTF-8, retrying as cp1256")
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True, encoding="cp1256")
    return _frame_to_dataset(df, str(path))


def read_excel(path: Union[str, Path]) -> Dataset:
    """First sheet only."""
    df = pd.read_excel(path, sheet_name=0, dtype=str)
    return _frame_to_dataset(df, str(path))


def read_json(path: Union[str, Path]) -> Union[Dataset, ExportedAnalysis]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidAnalysisFileError(f"Error parsing JSON file {path}: {e}") from e

    if is_exported_analysis(data):
        logger.info(f"{path} is an exported analysis")
        return validate_export_dict(data)

    rows = data if isinstance(data, list) else [data]
    rows = [row for row in rows if isinstance(row, dict)]
    columns = [str(k) for k in rows[0].keys()] if rows else []
    return Dataset(rows=rows, columns=columns, source=str(path))


def load_file(path: Union[str, Path]) -> Union[Dataset, ExportedAnalysis]:
    """Load a data file by extension."""
    ext = Path(path).suffix.lower().lstrip(".")
    if ext not in FileConstants.SUPPORTED_EXTENSIONS:
        raise UnsupportedFileError(
            f"Unsupported file type '.{ext}'. Supported: {', '.join(FileConstants.SUPPORTED_EXTENSIONS)}"
        )
    if ext == "csv":
        loaded = read_csv(path)
    elif ext in ("xlsx", "xls"):
        loaded = read_excel(path)
    else:
        loaded = read_json(path)

    if isinstance(loaded, Dataset):
        logger.info(f"Loaded {len(loaded.rows)} rows with columns {loaded.columns} from {path}")
    return loaded


def detect_column(columns: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    """First column whose lowercase name contains a keyword, trying keywords in order."""
    lowered = [c.lower() for c in columns]
    for keyword in keywords:
        for i, name in enumerate(lowered):
            if keyword in name:
                return columns[i]
    return None


def default_text_column(columns: Sequence[str]) -> Optional[str]:
    detected = detect_column(columns, ColumnConstants.TEXT_KEYWORDS)
    if detected:
        return detected
    if not columns:
        return None
    if len(columns) > ColumnConstants.FALLBACK_TEXT_INDEX:
        return columns[ColumnConstants.FALLBACK_TEXT_INDEX]
    return columns[0]


def default_columns(columns: Sequence[str]) -> Dict[str, Optional[str]]:
    """Pre-selected text, verified and engagement columns."""
    return {
        "text": default_text_column(columns),
        "verified": detect_column(columns, ColumnConstants.VERIFIED_KEYWORDS),
        "engagement": detect_column(columns, ColumnConstants.ENGAGEMENT_KEYWORDS),
    }


def parse_verified(value: Any) -> bool:
    """True only for "true", "1" or "yes", case-insensitive."""
    return str(_cell(value)).lower() in ColumnConstants.VERIFIED_TRUE_VALUES


def parse_engagement(value: Any) -> float:
    """
    Leading-number parse: "12" -> 12, "3.5k" -> 3.5, "abc" -> 0.

    Negative values are clamped to 0.
    """
    value = _cell(value)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return max(0.0, number)


def build_records(dataset: Dataset, text_column: str, verified_column: Optional[str] = None,
                  engagement_column: Optional[str] = None) -> List[InputRecord]:
    """
    Select columns from each row and coerce them into InputRecords.

    Rows whose text is empty after trimming are dropped.
    """
    for column in (text_column, verified_column, engagement_column):
        if column and column not in dataset.columns:
            raise ColumnNotFoundError(column, dataset.columns)

    records = []
    for row in dataset.rows:
        text = str(_cell(row.get(text_column))).strip()
        if not text:
            continue
        records.append(InputRecord(
            text=text,
            is_verified=parse_verified(row.get(verified_column)) if verified_column else False,
            engagement=parse_engagement(row.get(engagement_column)) if engagement_column else 0.0,
        ))

    skipped = len(dataset.rows) - len(records)
    if skipped:
        logger.info(f"Dropped {skipped} rows with empty '{text_column}'")
    return records
