"""
Intent Classification

Maps a free-text prompt to exactly one Intent. Cheap regex pre-filters run
first (LinkedIn profile URLs, then exact command names); anything else is
classified by the LLM and validated strictly. A reply that does not match the
expected shape raises MalformedAIResponseError rather than being coerced.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from leadgen.assistant.prompts import INTENT_SYSTEM_PROMPT
from leadgen.common.error_handling import MalformedAIResponseError
from leadgen.common.llm_factory import LLMJsonClient
from leadgen.common.types import COMMAND_NAMES, INTENT_TYPES, Intent

logger = logging.getLogger(__name__)

LINKEDIN_PROFILE_PATTERN = re.compile(r"(https?://)?(www\.)?linkedin\.com/in/[A-Za-z0-9_-]+")


def find_linkedin_profiles(prompt: str) -> List[str]:
    """Every LinkedIn-profile-shaped token in `prompt`, in order."""
    return [match.group(0) for match in LINKEDIN_PROFILE_PATTERN.finditer(prompt)]


def match_command(prompt: str) -> Optional[str]:
    """The command name when the whole prompt is one, else None."""
    normalized = " ".join(prompt.strip().lower().split())
    return normalized if normalized in COMMAND_NAMES else None


def prefilter(prompt: str) -> Optional[Intent]:
    """Classify without an LLM when the prompt is unambiguous."""
    profiles = find_linkedin_profiles(prompt)
    if profiles:
        return Intent(type="enrich_by_profile", values=profiles)

    command = match_command(prompt)
    if command:
        return Intent(type="command", command=command, values=[])

    return None


def validate_intent_payload(payload: Dict[str, Any]) -> Intent:
    """
    Build an Intent from an LLM reply, rejecting anything off-contract.

    Raises:
        MalformedAIResponseError: On an unknown type or wrongly-typed fields
    """
    intent_type = payload.get("type")
    if intent_type not in INTENT_TYPES:
        raise MalformedAIResponseError(f"AI returned malformed output: unknown intent type {intent_type!r}")

    values = payload.get("values", [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise MalformedAIResponseError("AI returned malformed output: 'values' must be a list of strings")

    command = payload.get("command")
    if command is not None and not isinstance(command, str):
        raise MalformedAIResponseError("AI returned malformed output: 'command' must be a string")
    if intent_type == "command" and not command:
        raise MalformedAIResponseError("AI returned malformed output: command intent without a command name")

    count = payload.get("count")
    # bool is an int subclass; reject it explicitly
    if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
        raise MalformedAIResponseError("AI returned malformed output: 'count' must be an integer")

    return Intent(
        type=intent_type,
        values=values,
        command=command.strip().lower() if command else None,
        count=count,
    )


class IntentClassifier(ABC):
    """Strategy interface for prompt classification."""

    @abstractmethod
    async def classify(self, prompt: str) -> Intent:
        pass


class RuleBasedIntentClassifier(IntentClassifier):
    """Pre-filters only; everything else is `unknown`. Needs no API key."""

    async def classify(self, prompt: str) -> Intent:
        return prefilter(prompt) or Intent(type="unknown", values=[])


class LLMIntentClassifier(IntentClassifier):
    """Pre-filters first, then the LLM with strict validation."""

    def __init__(self, llm_client: Optional[LLMJsonClient] = None):
        self.llm_client = llm_client or LLMJsonClient()

    async def classify(self, prompt: str) -> Intent:
        intent = prefilter(prompt)
        if intent is not None:
            logger.debug(f"Pre-filter classified prompt as {intent.type}")
            return intent

        payload = await self.llm_client.complete_json(INTENT_SYSTEM_PROMPT, prompt, strict=True)
        intent = validate_intent_payload(payload)
        logger.info(f"LLM classified prompt as {intent.type}")
        return intent
