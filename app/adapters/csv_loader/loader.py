"""CSV loader — reads and normalizes company / user seed files."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path

from app.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    normalize_role,
)

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect] | csv.Dialect:
    """Try to detect delimiter (comma/semicolon/tab) to support spreadsheet exports."""
    # Localized spreadsheet exports often use ';'
    if not sample:
        return csv.get_dialect("excel")

    first_line = sample.splitlines()[0] if sample else ""
    delims = [";", ",", "\t"]
    counts = {d: first_line.count(d) for d in delims}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect

    try:
        return csv.Sniffer().sniff(sample, delimiters=[",", ";", "\t"])
    except csv.Error:
        return csv.get_dialect("excel")


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        dialect = _sniff_dialect(sample)
        reader = csv.DictReader(f, dialect=dialect)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = []
        for raw_row in reader:
            row = {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            rows.append(row)

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_companies(file_path: Path) -> list[dict]:
    """Load the companies CSV.

    Expected columns (after normalization): name / company / company_name
    """
    rows = _read_csv(file_path)
    companies = []
    for row in rows:
        name = clean_string(
            row.get("name") or row.get("company") or row.get("company_name")
        )
        if not name:
            logger.warning("Skipping company row without a name: %s", row)
            continue
        companies.append({"name": name})
    logger.info("Parsed %d companies", len(companies))
    return companies


def load_users(file_path: Path) -> list[dict]:
    """Load the users CSV.

    Expected columns (after normalization):
        name, role, company (or company_name), created_at (optional, ISO 8601)
    """
    rows = _read_csv(file_path)
    users = []
    for row in rows:
        name = clean_string(row.get("name") or row.get("full_name")) or ""
        raw_role = row.get("role") or row.get("position")
        role = normalize_role(raw_role)
        if role is None:
            logger.warning("User '%s': unknown role %r, skipping", name, raw_role)
            continue
        users.append({
            "name": name,
            "role": role,
            "company_name": clean_string(row.get("company") or row.get("company_name")) or "",
            "created_at": _parse_datetime(row.get("created_at") or row.get("createdat")),
        })
    logger.info("Parsed %d users", len(users))
    return users


def _parse_datetime(value: str | None) -> datetime | None:
    """Safely parse an ISO 8601 timestamp."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        logger.warning("Could not parse timestamp: %s", value)
        return None
