"""
Export Pipeline - CSV/JSON output of extracted lead records

Key Features:
- Fixed CSV header and column order
- Minimal CSV quoting (quote only fields with a comma, quote or newline)
- JSON export with the camelCase field names used in responses
- Export-layer dedupe across accumulated pages
- Data-quality summary (share of records missing title/company/location)
"""

import csv
import io
import json
import re
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from ..schemas import Record


CSV_COLUMNS = [
    ("Name", "name"),
    ("Title", "title"),
    ("Company", "company"),
    ("Location", "location"),
    ("Industry", "industry"),
    ("Connection Degree", "connection_degree"),
    ("Shared Connections", "shared_connections"),
    ("Profile URL", "profile_url"),
]
CSV_FIELDNAMES = [h for h, _ in CSV_COLUMNS]
CSV_HEADER = ",".join(CSV_FIELDNAMES)


def _csv_dict(record: Record) -> dict:
    return {header: getattr(record, attr) for header, attr in CSV_COLUMNS}


def write_csv(f, records: Iterable[Record]) -> None:
    """Header plus one row per record; QUOTE_MINIMAL quotes only fields with a comma, quote or newline."""
    writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES, lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow(_csv_dict(record))


def csv_row(record: Record) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(_csv_dict(record).values())
    return buf.getvalue()[:-1]


def records_to_csv(records: Iterable[Record]) -> str:
    buf = io.StringIO()
    write_csv(buf, records)
    return buf.getvalue()


def default_filename(ext: str = "csv", on: Optional[date] = None) -> str:
    d = on or date.today()
    return f"linkedin_leads_{d.isoformat()}.{ext}"


def normalize_profile_url(u: str) -> str:
    """Profile URL key for dedupe: lowercase host, no query/fragment/trailing slash."""
    try:
        sp = urlsplit(u)
        netloc = (sp.netloc or '').lower()
        if netloc.startswith('www.'):
            netloc = netloc[4:]
        path = sp.path or ''
        if path.endswith('/') and path != '/':
            path = path.rstrip('/')
        return urlunsplit(sp._replace(netloc=netloc, path=path, query='', fragment=''))
    except ValueError:
        return u or ''


def normalize_person_name(s: str) -> str:
    if not s:
        return ""
    s2 = s.lower().replace(',', ' ').replace('.', ' ')
    return re.sub(r"\s+", " ", s2).strip()


def _filled(r: Record) -> int:
    return sum(1 for v in (r.title, r.company, r.location, r.industry, r.connection_degree, r.shared_connections) if v)


def dedupe_records(records: List[Record]) -> List[Record]:
    """Keep one record per profile URL (or per name when there is no URL).

    The more complete record wins; first-seen order is preserved.
    """
    if not records:
        return []
    best: dict = {}
    order: List[tuple] = []
    for r in records:
        key = ("url", normalize_profile_url(r.profile_url)) if r.profile_url else ("name", normalize_person_name(r.name))
        prev = best.get(key)
        if prev is None:
            order.append(key)
            best[key] = r
        elif _filled(r) > _filled(prev):
            best[key] = r
    kept = [best[k] for k in order]
    removed = len(records) - len(kept)
    if removed > 0:
        print(f"🧹 Dedupe: kept {len(kept)} of {len(records)}")
    return kept


def quality_issues(records: List[Record]) -> List[str]:
    """Human-readable warnings about fields missing across the records."""
    total = len(records)
    if total == 0:
        return []
    issues: List[str] = []
    for attr, label in (("title", "job titles"), ("company", "companies"), ("location", "locations")):
        missing = sum(1 for r in records if not getattr(r, attr).strip())
        if missing:
            percent = round(missing / total * 100)
            issues.append(f"{percent}% of profiles are missing {label}")
    return issues


class RecordExporter:
    """
    Writes accumulated lead records to CSV and/or JSON files.
    """

    def __init__(self, output_dir: Union[str, Path] = "output"):
        """
        Args:
            output_dir: Directory for output files (created if doesn't exist)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def to_csv(self, records: List[Record], filename: Optional[str] = None) -> Path:
        """
        Export records to CSV with the fixed lead header.

        Returns:
            Path to created CSV file
        """
        if not records:
            raise ValueError("No records to export")
        csv_path = self.output_dir / (filename or default_filename("csv"))
        with open(csv_path, 'w', newline='', encoding='utf-8') as f:
            write_csv(f, records)
        print(f"💾 CSV exported: {csv_path} ({len(records)} leads)")
        return csv_path

    def to_json(self, records: List[Record], filename: Optional[str] = None, pretty: bool = True) -> Path:
        """
        Export records to JSON (list of camelCase objects).

        Returns:
            Path to created JSON file
        """
        if not records:
            raise ValueError("No records to export")
        json_path = self.output_dir / (filename or default_filename("json"))
        payload = [r.to_message() for r in records]
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2 if pretty else None)
        print(f"💾 JSON exported: {json_path} ({len(records)} leads)")
        return json_path

    def to_both(self, records: List[Record], base_filename: Optional[str] = None) -> dict:
        stem = base_filename or default_filename("csv")[:-4]
        return {
            'csv': self.to_csv(records, f"{stem}.csv"),
            'json': self.to_json(records, f"{stem}.json"),
        }

    def export(self, records: List[Record], fmt: str = "csv", base_filename: Optional[str] = None) -> List[Path]:
        fmt = getattr(fmt, "value", fmt)
        if fmt == "both":
            return list(self.to_both(records, base_filename).values())
        if fmt == "json":
            return [self.to_json(records, f"{base_filename}.json" if base_filename else None)]
        if fmt == "csv":
            return [self.to_csv(records, f"{base_filename}.csv" if base_filename else None)]
        raise ValueError(f"unknown export format: {fmt}")
