"""
FastAPI service for the lead-generation assistant.

Endpoints:
- POST   /api/prompt               - Run one chat turn against a session
- GET    /api/leads                - List stored leads, newest first
- POST   /api/save-leads           - Store leads (existing e-mails/ids are skipped)
- DELETE /api/leads/{lead_id}      - Delete one stored lead
- GET    /api/quick-reply-action   - Quick-reply link target from outgoing e-mails
- GET    /api/email-activity       - Latest e-mail activity events
- GET    /health                   - Liveness
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from leadgen.api.models import (
    HealthResponse,
    PromptRequest,
    PromptResponse,
    SaveLeadsRequest,
    SaveLeadsResponse,
)
from leadgen.assistant.dispatcher import AssistantContext, build_default_context, process_user_prompt
from leadgen.assistant.replies import InvalidQuickReplyError, QuickReplyService
from leadgen.assistant.session import ProspectSession, SessionStore
from leadgen.common.config import Config
from leadgen.common.logger import setup_logging
from leadgen.services.csv_import import load_prospects_from_csv
from version import __version__

setup_logging(Config.LOG_LEVEL, Config.LOG_FORMAT)
logger = logging.getLogger(__name__)

ACTIVITY_FEED_LIMIT = 50

app = FastAPI(title="Lead Generation Assistant", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_context: Optional[AssistantContext] = None
_sessions = SessionStore()


def get_context() -> AssistantContext:
    global _context
    if _context is None:
        _context = build_default_context()
        logger.info(Config.summary())
    return _context


def get_session_store() -> SessionStore:
    return _sessions


def get_quick_reply_service(context: AssistantContext = Depends(get_context)) -> QuickReplyService:
    return QuickReplyService(context.repository, context.outreach.email_sender)


async def _seed_session(session: ProspectSession, csv_path: str) -> None:
    """Load the initial prospect list into a fresh session, when the file exists."""
    if not Path(csv_path).exists():
        return
    try:
        prospects = await asyncio.to_thread(load_prospects_from_csv, csv_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load initial prospects from {csv_path}: {e}")
        return
    session.add_prospects(prospects)


@app.post("/api/prompt", response_model=PromptResponse)
async def run_prompt(
    request: PromptRequest,
    context: AssistantContext = Depends(get_context),
    sessions: SessionStore = Depends(get_session_store),
) -> PromptResponse:
    """
    Run one prompt through the assistant.

    Failures are reported in the response text, so this endpoint answers 200
    for anything that passes request validation.
    """
    is_new = request.session_id is None or sessions.get(request.session_id) is None
    session = sessions.get_or_create(request.session_id)
    if is_new:
        await _seed_session(session, context.csv_path)

    session.data_source = request.data_source
    if request.selected_ids is not None:
        session.selected_ids = set(request.selected_ids)

    response = await process_user_prompt(request.prompt, session, context)
    return PromptResponse(session_id=session.session_id, **response.model_dump())


@app.get("/api/leads")
async def list_leads(context: AssistantContext = Depends(get_context)) -> List[Dict[str, Any]]:
    leads = await asyncio.to_thread(context.repository.list)
    return [lead.model_dump(mode="json") for lead in leads]


@app.post("/api/save-leads", response_model=SaveLeadsResponse)
async def save_leads(
    request: SaveLeadsRequest,
    context: AssistantContext = Depends(get_context),
) -> SaveLeadsResponse:
    if not request.leads:
        raise HTTPException(status_code=400, detail="No leads provided")

    result = await asyncio.to_thread(context.repository.save, request.leads)
    return SaveLeadsResponse(
        message=f"Saved {result.inserted_count} new lead(s).",
        inserted_count=result.inserted_count,
        skipped_count=result.skipped_count,
    )


@app.delete("/api/leads/{lead_id}")
async def delete_lead(lead_id: str, context: AssistantContext = Depends(get_context)) -> Dict[str, str]:
    deleted = await asyncio.to_thread(context.repository.delete, lead_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"message": "Lead deleted successfully."}


@app.get("/api/quick-reply-action", response_class=HTMLResponse)
async def quick_reply_action(
    prospect_id: Optional[str] = Query(default=None, alias="prospectId"),
    prospect_email: Optional[str] = Query(default=None, alias="prospectEmail"),
    action: Optional[str] = Query(default=None),
    service: QuickReplyService = Depends(get_quick_reply_service),
) -> HTMLResponse:
    try:
        page = await service.handle(prospect_id, prospect_email, action)
    except InvalidQuickReplyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return HTMLResponse(content=page)


@app.get("/api/email-activity")
async def email_activity(context: AssistantContext = Depends(get_context)) -> List[Dict[str, Any]]:
    activity = await asyncio.to_thread(context.repository.list_activity, ACTIVITY_FEED_LIMIT)
    return [event.model_dump(mode="json") for event in activity]


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        storage="mongodb" if Config.MONGODB_URI else "memory",
    )


@app.on_event("startup")
async def check_configuration():
    Config.warn_if_incomplete(logger)


@app.on_event("shutdown")
async def drain_background_saves():
    """Let pending background saves finish before the process exits."""
    if _context is not None and _context.persister is not None:
        await _context.persister.drain()
        logger.info("Background saves drained")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
