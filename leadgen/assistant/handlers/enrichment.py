"""
Profile and domain enrichment.

Every target is requested concurrently (fire-all, await-all). Successes are
normalized in input order; failures are logged and kept as FailureRecords so
one bad URL never hides the others. A configuration error such as a missing
API key is raised instead of being counted per target.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from leadgen.assistant.handlers.normalizers import company_from_provider, contact_from_enrichment
from leadgen.common.error_handling import ConfigurationError, FailureCollector
from leadgen.common.logger import get_logger
from leadgen.common.persistence import BackgroundPersister
from leadgen.common.types import AssistantResponse, BatchResult, CompanyRecord, ContactRecord
from leadgen.services.sources import ContactProvider

T = TypeVar("T")


def summarize_enrichment(success_count: int, failure_count: int, target_label: str) -> str:
    """Chat text for a finished enrichment run."""
    if success_count == 0:
        return (
            f"Sorry, I couldn't enrich any of the provided {target_label}. "
            f"Please check the logs for errors."
        )
    text = f"✅ Enrichment complete. Successfully processed {success_count} item(s)."
    if failure_count > 0:
        text += f" Failed to process {failure_count} item(s)."
    return text


class EnrichmentHandler:
    """Enriches LinkedIn profiles and company domains through a ContactProvider."""

    def __init__(
        self,
        provider: ContactProvider,
        persister: Optional[BackgroundPersister] = None,
        session_id: Optional[str] = None,
    ):
        self.provider = provider
        self.persister = persister
        self.logger = get_logger(__name__, session_id=session_id, component="enrichment")

    async def _gather(
        self,
        targets: List[str],
        fetch: Callable[[str], Awaitable[Any]],
        build: Callable[[str, Any], List[T]],
        operation: str,
    ) -> BatchResult[T]:
        collector = FailureCollector(self.logger, operation=operation)
        outcomes = await asyncio.gather(*(fetch(t) for t in targets), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, ConfigurationError):
                raise outcome

        result: BatchResult[T] = BatchResult()
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                collector.add(target, outcome)
                continue
            try:
                result.successes.extend(build(target, outcome))
            except Exception as e:
                collector.add(target, e)

        result.failures = collector.failures
        self.logger.info(
            f"{operation}: {len(result.successes)} succeeded, {result.failure_count} failed"
        )
        return result

    async def enrich_profile_records(self, urls: List[str]) -> BatchResult[ContactRecord]:
        return await self._gather(
            urls,
            self.provider.enrich_profile,
            lambda url, profile: [contact_from_enrichment(profile, url)],
            operation="ContactOut profile enrich",
        )

    async def enrich_domain_records(self, domains: List[str]) -> BatchResult[CompanyRecord]:
        return await self._gather(
            domains,
            self.provider.enrich_domain,
            lambda _domain, companies: [company_from_provider(c) for c in companies],
            operation="ContactOut domain enrich",
        )

    async def enrich_profiles(self, urls: List[str]) -> AssistantResponse:
        """Enrich LinkedIn profile URLs into contacts."""
        result = await self.enrich_profile_records(urls)
        text = summarize_enrichment(len(result.successes), result.failure_count, "profiles")

        if not result.successes:
            return AssistantResponse(text=text)

        if self.persister is not None:
            self.persister.persist(result.successes)

        return AssistantResponse(
            text=text,
            data=[c.model_dump(mode="json") for c in result.successes],
            new_record_hint=result.successes[0],
            contacts=result.successes,
        )

    async def enrich_domains(self, domains: List[str]) -> AssistantResponse:
        """Enrich company domains into company records."""
        result = await self.enrich_domain_records(domains)
        text = summarize_enrichment(len(result.successes), result.failure_count, "domains")

        if not result.successes:
            return AssistantResponse(text=text)

        return AssistantResponse(
            text=text,
            data=[c.model_dump(mode="json") for c in result.successes],
        )
