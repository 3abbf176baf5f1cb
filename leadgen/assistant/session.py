"""
Per-session working state.

A ProspectSession holds everything one conversation mutates: the prospect
working set, the current selection, the active data source, and the outreach
drafts cached between "generate previews" and "send emails".
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from leadgen.common.dedupe import merge_contacts
from leadgen.common.types import ContactRecord, DataSource, OutreachDraft


@dataclass
class ProspectSession:
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    prospects: List[ContactRecord] = field(default_factory=list)
    selected_ids: Set[str] = field(default_factory=set)
    data_source: DataSource = "contactout"
    draft_cache: Dict[str, OutreachDraft] = field(default_factory=dict)

    def add_prospects(self, contacts: List[ContactRecord]) -> int:
        """Merge `contacts` into the working set; returns how many were new."""
        before = len(self.prospects)
        self.prospects = merge_contacts(self.prospects, contacts)
        return len(self.prospects) - before

    def remove_prospect(self, prospect_id: str) -> bool:
        before = len(self.prospects)
        self.prospects = [p for p in self.prospects if p.id != prospect_id]
        self.selected_ids.discard(prospect_id)
        self.draft_cache.pop(prospect_id, None)
        return len(self.prospects) < before

    def selected_prospects(self) -> List[ContactRecord]:
        return [p for p in self.prospects if p.id in self.selected_ids]

    def get_prospect(self, prospect_id: str) -> Optional[ContactRecord]:
        for prospect in self.prospects:
            if prospect.id == prospect_id:
                return prospect
        return None

    def clear_drafts(self) -> None:
        self.draft_cache.clear()


class SessionStore:
    """Process-local registry of sessions keyed by id."""

    def __init__(self):
        self._sessions: Dict[str, ProspectSession] = {}

    def get_or_create(self, session_id: Optional[str] = None) -> ProspectSession:
        if session_id and session_id in self._sessions:
            return self._sessions[session_id]
        session = ProspectSession(session_id=session_id) if session_id else ProspectSession()
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ProspectSession]:
        return self._sessions.get(session_id)

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
