"""
CSV prospect import.

Reads a prospect list (header row, case-insensitive column names) into
ContactRecords, de-duplicated on work e-mail, and extracts LinkedIn URLs for
the "enrich prospects from csv" command.

Recognised columns:
    id, full_name | prospect_name, work_email | email, personal_emails,
    phone_numbers | phone, company_name | company, role, country, linkedin_url
"""

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from leadgen.common.dedupe import normalize_email
from leadgen.common.error_handling import log_on_exception
from leadgen.common.types import ContactRecord, is_valid_email

logger = logging.getLogger(__name__)


def _normalise_key(value: str) -> str:
    return value.strip().lower()


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _read_rows(source: Union[str, Path, io.TextIOBase]) -> List[Dict[str, str]]:
    if isinstance(source, (str, Path)):
        with log_on_exception(logger, f"CSV read {source}"):
            with Path(source).open(newline="", encoding="utf-8-sig") as handle:
                return _normalised_rows(csv.DictReader(handle))
    return _normalised_rows(csv.DictReader(source))


def _normalised_rows(reader: csv.DictReader) -> List[Dict[str, str]]:
    rows = []
    for row in reader:
        rows.append({
            _normalise_key(key): (value or "").strip()
            for key, value in row.items()
            if key
        })
    return rows


def load_prospects_from_csv(
    source: Union[str, Path, io.TextIOBase],
    source_tag: str = "csv_initial_load",
) -> List[ContactRecord]:
    """
    Parse prospects from a CSV file or text stream.

    Rows without a valid work e-mail are skipped, as are rows whose e-mail
    already appeared (as a work or personal address) earlier in the file.
    """
    prospects: List[ContactRecord] = []
    seen_emails = set()

    for row in _read_rows(source):
        work_email = row.get("work_email") or row.get("email")
        if not is_valid_email(work_email):
            continue
        key = normalize_email(work_email)
        if key in seen_emails:
            continue

        personal_emails = _split_list(row.get("personal_emails"))
        seen_emails.add(key)
        seen_emails.update(normalize_email(e) for e in personal_emails if is_valid_email(e))

        fields = dict(
            full_name=row.get("full_name") or row.get("prospect_name") or "",
            role=row.get("role", ""),
            company=row.get("company_name") or row.get("company") or "",
            work_email=work_email,
            personal_emails=personal_emails,
            phone_numbers=_split_list(row.get("phone_numbers") or row.get("phone")),
            country=row.get("country", ""),
            source=source_tag,
            linkedin_url=row.get("linkedin_url") or None,
        )
        if row.get("id"):
            fields["id"] = row["id"]
        prospects.append(ContactRecord(**fields))

    logger.info(f"Loaded {len(prospects)} prospects from CSV ({source_tag})")
    return prospects


def load_linkedin_urls_from_csv(source: Union[str, Path, io.TextIOBase]) -> List[str]:
    """Return the non-empty `linkedin_url` values in file order."""
    return [row["linkedin_url"] for row in _read_rows(source) if row.get("linkedin_url")]
