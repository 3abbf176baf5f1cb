"""
Contact De-duplication

Single source of truth for merging contact records. A record is a duplicate
when its id or its lowercased work e-mail was already seen. Records without
an e-mail are compared on id alone.

Usage:
    from leadgen.common.dedupe import merge_contacts

    merged = merge_contacts(session.prospects, new_contacts)
"""

from typing import Iterable, List, Optional, Set

from leadgen.common.types import ContactRecord


def normalize_email(email: Optional[str]) -> str:
    """
    Normalize an e-mail for comparison.

    Examples:
        >>> normalize_email("  Jane.Doe@Acme.COM ")
        'jane.doe@acme.com'
        >>> normalize_email(None)
        ''
    """
    if not email:
        return ""
    return email.strip().lower()


def email_domain(email: Optional[str]) -> str:
    """Domain part of an address, lowercased ('' when absent)."""
    normalized = normalize_email(email)
    if "@" not in normalized:
        return ""
    return normalized.rsplit("@", 1)[1]


def dedupe_contacts(contacts: Iterable[ContactRecord]) -> List[ContactRecord]:
    """Keep the first record per id and per work e-mail."""
    seen_ids: Set[str] = set()
    seen_emails: Set[str] = set()
    unique: List[ContactRecord] = []
    for contact in contacts:
        key = normalize_email(contact.work_email)
        if contact.id in seen_ids or (key and key in seen_emails):
            continue
        seen_ids.add(contact.id)
        if key:
            seen_emails.add(key)
        unique.append(contact)
    return unique


def merge_contacts(
    existing: Iterable[ContactRecord],
    incoming: Iterable[ContactRecord],
) -> List[ContactRecord]:
    """
    Append `incoming` to `existing`, skipping any whose id or e-mail is already present.

    Existing order is preserved and existing records always win.
    """
    return dedupe_contacts([*existing, *incoming])
