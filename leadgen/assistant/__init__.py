"""
Conversational assistant: intent classification, per-intent handlers,
outreach generation and the prompt dispatcher.

Usage:
    from leadgen.assistant import ProspectSession, build_default_context, process_user_prompt

    context = build_default_context()
    session = ProspectSession()
    response = await process_user_prompt("show prospects", session, context)
"""

from leadgen.assistant.dispatcher import AssistantContext, build_default_context, process_user_prompt
from leadgen.assistant.session import ProspectSession, SessionStore

__all__ = [
    "AssistantContext",
    "ProspectSession",
    "SessionStore",
    "build_default_context",
    "process_user_prompt",
]
