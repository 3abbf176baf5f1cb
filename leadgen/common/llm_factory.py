"""
LLM Factory Module.

Provides the factory for ChatOpenAI instances and the JSON-mode client used by
every component that asks the model for structured output (intent
classification, search payloads, scraping, outreach copy).

Usage:
    from leadgen.common.llm_factory import LLMJsonClient

    client = LLMJsonClient()
    payload = await client.complete_json(SYSTEM_PROMPT, user_prompt)
"""

import logging
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from leadgen.common.config import Config
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.json_utils import parse_llm_json
from leadgen.common.retry import api_call_with_retry

logger = logging.getLogger(__name__)


def create_llm(
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    json_mode: bool = True,
    **kwargs: Any,
) -> Runnable:
    """
    Create a ChatOpenAI instance, bound to JSON mode by default.

    Args:
        model: Model name (defaults to Config.DEFAULT_MODEL)
        temperature: Temperature (defaults to Config.ANALYTICAL_TEMPERATURE)
        json_mode: Bind response_format=json_object to every call
        **kwargs: Additional ChatOpenAI parameters

    Raises:
        MissingCredentialError: If OPENAI_API_KEY is not configured
    """
    if not Config.OPENAI_API_KEY:
        raise MissingCredentialError("OPENAI_API_KEY")

    effective_model = model or Config.DEFAULT_MODEL
    effective_temperature = temperature if temperature is not None else Config.ANALYTICAL_TEMPERATURE

    llm = ChatOpenAI(
        model=effective_model,
        temperature=effective_temperature,
        api_key=Config.OPENAI_API_KEY,
        timeout=Config.HTTP_TIMEOUT_SECONDS,
        # Retries are owned by api_call_with_retry
        max_retries=0,
        **kwargs,
    )

    logger.debug(f"Created OpenAI LLM: model={effective_model}, json_mode={json_mode}")
    if json_mode:
        return llm.bind(response_format={"type": "json_object"})
    return llm


class LLMJsonClient:
    """
    JSON-mode chat completion with retries and strict parsing.

    The underlying ChatOpenAI is created on first use so that a missing key
    surfaces as MissingCredentialError from the call that needed it.
    """

    def __init__(
        self,
        llm: Optional[Any] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self._llm = llm
        self._model = model
        self._temperature = temperature

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = create_llm(model=self._model, temperature=self._temperature)
        return self._llm

    async def complete_json(self, system: str, user: str, strict: bool = True) -> Dict[str, Any]:
        """
        Send a system + user message pair and parse the reply as a JSON object.

        Args:
            system: Instruction prompt
            user: User content
            strict: When False, malformed JSON is repaired instead of rejected

        Raises:
            MalformedAIResponseError: If the reply is not a JSON object
        """
        messages = [SystemMessage(content=system), HumanMessage(content=user)]
        llm = self.llm

        response = await api_call_with_retry(lambda: llm.ainvoke(messages))
        content = response.content if hasattr(response, "content") else str(response)
        if isinstance(content, list):
            # Content blocks; keep the text parts
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )

        logger.debug(f"LLM reply ({len(content)} chars)")
        return parse_llm_json(content, strict=strict)
