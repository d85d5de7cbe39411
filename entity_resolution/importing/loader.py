"""CSV / Excel / JSON article file loader"""

import csv
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd

CSV_SEPARATORS = [",", ";", "\t"]
CSV_ENCODINGS = ["utf-8-sig", "cp1252"]

# Text for CSV cells, typed numbers for numeric Excel / JSON cells
CellValue = Union[str, int, float]


def _sniff_separator(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters="".join(CSV_SEPARATORS)).delimiter
    except csv.Error:
        # Fall back to the separator that occurs most often in the header line
        first_line = sample.splitlines()[0] if sample else ""
        return max(CSV_SEPARATORS, key=first_line.count)


def _read_csv(file_path: Path) -> pd.DataFrame:
    last_error = None
    for encoding in CSV_ENCODINGS:
        try:
            with open(file_path, "r", encoding=encoding) as f:
                sample = f.read(4096)
            return pd.read_csv(
                file_path,
                sep=_sniff_separator(sample),
                dtype=str,
                keep_default_na=False,
                encoding=encoding,
            )
        except UnicodeDecodeError as e:
            last_error = e
    raise ValueError(f"Could not decode CSV file {file_path}: {last_error}")


def _read_frame(file_path: Path) -> pd.DataFrame:
    suffix = file_path.suffix.lower()
    if suffix in (".csv", ".txt"):
        return _read_csv(file_path)
    if suffix in (".xlsx", ".xlsm"):
        return pd.read_excel(file_path, engine="openpyxl")
    if suffix == ".json":
        return pd.read_json(file_path, orient="records", dtype=False)
    raise ValueError(f"Unsupported file type: {file_path.suffix}")


def _cell_value(value) -> CellValue:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        # Integer columns with gaps come back as float
        return int(value) if value.is_integer() else value
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return "" if text.lower() in ["nan", "nat", "none"] else text


def load_table(file_path: Path | str) -> Tuple[List[str], List[Dict[str, CellValue]]]:
    """
    Load an article file into headers and rows.

    CSV cells stay text (German number formatting is resolved later). Numeric Excel
    and JSON cells keep their number type so they are never re-parsed from text.

    Args:
        file_path: Path to a .csv, .txt, .xlsx, .xlsm or .json file

    Returns:
        (headers, rows) where each row maps header -> cell text or number ("" for
        empty cells)

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file type is unsupported or the file cannot be read
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Import file not found: {file_path}")

    try:
        df = _read_frame(file_path)
    except ValueError:
        raise
    except Exception as e:
        raise ValueError(f"Error reading {file_path.name}: {e}")

    headers = [str(column).strip() for column in df.columns]

    rows = []
    for record in df.itertuples(index=False, name=None):
        rows.append({header: _cell_value(value) for header, value in zip(headers, record)})

    return headers, rows


def get_table_stats(headers: List[str], rows: List[Dict[str, CellValue]]) -> Dict[str, int]:
    """
    Get statistics about a loaded table.

    Args:
        headers: Column headers
        rows: Loaded rows

    Returns:
        Dictionary with statistics
    """
    empty_rows = sum(1 for row in rows if all(value == "" for value in row.values()))
    return {
        "columns": len(headers),
        "total_rows": len(rows),
        "empty_rows": empty_rows,
    }
