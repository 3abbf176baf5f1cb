"""
Provider response normalizers.

One explicit mapping function per provider schema. Every optional field has a
default, and a record with a name but no means of contact is still built.
Addresses that fail validation are dropped from the record rather than
failing the whole record.
"""

from typing import Any, Dict, List, Optional

from leadgen.common.types import CompanyRecord, ContactRecord, Website, is_valid_email


def _as_list(value: Any) -> List[str]:
    """Coerce a scalar, list or None into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    text = str(value).strip()
    return [text] if text else []


def _first_valid_email(value: Any) -> Optional[str]:
    for email in _as_list(value):
        if is_valid_email(email):
            return email
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get("name") or "").strip()
    return str(value).strip()


def _location(value: Any) -> str:
    # ContactOut sometimes returns {"city": ..., "country": ...}
    if isinstance(value, dict):
        return str(value.get("country") or value.get("name") or "").strip()
    return _text(value)


def contact_from_enrichment(profile: Dict[str, Any], linkedin_url: str) -> ContactRecord:
    """Map a ContactOut /v1/people/enrich `profile` object."""
    company = profile.get("company")
    company_name = _text(company) if isinstance(company, dict) else ""
    return ContactRecord(
        full_name=_text(profile.get("full_name")),
        work_email=_first_valid_email(profile.get("work_email")),
        personal_emails=[e for e in _as_list(profile.get("personal_email")) if is_valid_email(e)],
        phone_numbers=_as_list(profile.get("phone")),
        role=_text(profile.get("headline") or profile.get("title")),
        country=_location(profile.get("location")),
        company=company_name or _text(profile.get("company_name")),
        source="contactout_enrichment",
        source_details=linkedin_url,
        linkedin_url=linkedin_url,
    )


def contact_from_search(profile: Dict[str, Any], query: str = "") -> ContactRecord:
    """Map a ContactOut /v1/people/search profile object."""
    contact_info = profile.get("contact_info") or {}
    linkedin_url = profile.get("url") or None
    if profile.get("li_vanity"):
        linkedin_url = f"https://www.linkedin.com/in/{profile['li_vanity']}"

    fields: Dict[str, Any] = dict(
        full_name=_text(profile.get("full_name")),
        work_email=_first_valid_email(contact_info.get("work_emails")),
        personal_emails=[
            e for e in _as_list(contact_info.get("personal_emails")) if is_valid_email(e)
        ],
        phone_numbers=_as_list(contact_info.get("phones")),
        company=_text(profile.get("company")),
        role=_text(profile.get("title") or profile.get("headline")),
        country=_location(profile.get("location")),
        source="contactout_search",
        query=query,
        linkedin_url=linkedin_url,
    )
    if profile.get("id"):
        fields["id"] = str(profile["id"])
    return ContactRecord(**fields)


def company_from_provider(company: Dict[str, Any]) -> CompanyRecord:
    """Map a ContactOut company object (domain enrichment or company search)."""
    fields: Dict[str, Any] = dict(
        name=_text(company.get("name")),
        domain=_text(company.get("domain")),
        industry=_text(company.get("industry")),
        size=_text(company.get("size")),
    )
    if company.get("id"):
        fields["id"] = str(company["id"])
    return CompanyRecord(**fields)


def contact_from_scraped_lead(lead: Dict[str, Any], page_url: str) -> ContactRecord:
    """Map one lead extracted by the LLM from a scraped page."""
    phones = lead.get("phone_numbers")
    if phones is None:
        phones = lead.get("phone")
    website = _text(lead.get("website"))
    score = lead.get("confidence_score")
    try:
        confidence = max(0, min(100, int(score))) if score is not None else None
    except (TypeError, ValueError):
        confidence = None

    return ContactRecord(
        full_name=_text(lead.get("full_name")),
        role=_text(lead.get("role")),
        company=_text(lead.get("company") or lead.get("organization")),
        work_email=_first_valid_email(lead.get("work_email")),
        personal_emails=[e for e in _as_list(lead.get("personal_emails")) if is_valid_email(e)],
        phone_numbers=_as_list(phones),
        country=_text(lead.get("country")),
        confidence_score=confidence,
        websites=[Website(type="work", url=website)] if website else [],
        source="ai_web_scrape",
        source_details=f"Scraped from {page_url}",
        query=page_url,
    )
