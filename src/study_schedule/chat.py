"""
Chat-style extraction session.

Holds the per-session API key (in memory only), the transcript, and the drafts
awaiting confirmation. Only one extraction may be in flight per session.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Literal, Optional

from extraction.material_extractor import MaterialExtractor
from llm.llm_client import LLMClient
from study_schedule.errors import (
    ParseError,
    RequestInFlight,
    UpstreamError,
    ValidationError,
)
from study_schedule.models import Material, MaterialDraft, Subject
from study_schedule.repositories import MaterialRepository

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! I'm ready to help you create materials from your text. Please share "
    "any context about your study materials, assignments, or schedule, and I'll "
    "extract and organize them into materials for your calendar."
)


@dataclass
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)


def default_extractor_factory(api_key: str) -> MaterialExtractor:
    return MaterialExtractor(llm_client=LLMClient(api_key=api_key))


class ExtractionSession:
    def __init__(
        self,
        api_key: str,
        materials: MaterialRepository,
        extractor_factory: Callable[[str], MaterialExtractor] = default_extractor_factory,
    ):
        if not api_key or not api_key.strip():
            raise ValidationError("An API key is required to connect")

        self.id = uuid.uuid4().hex
        self._api_key = api_key.strip()
        self._extractor_factory = extractor_factory
        self.materials = materials
        self.messages: List[ChatMessage] = [ChatMessage(role="assistant", content=GREETING)]
        self.drafts: List[MaterialDraft] = []
        self.busy = False
        self.last_error: Optional[str] = None
        self.last_used = time.monotonic()

    def __repr__(self) -> str:
        return f"ExtractionSession(id={self.id!r}, drafts={len(self.drafts)}, api_key='***')"

    def _say(self, content: str) -> ChatMessage:
        msg = ChatMessage(role="assistant", content=content)
        self.messages.append(msg)
        return msg

    async def send(
        self,
        text: str,
        subjects: List[Subject],
        reference_date: Optional[date] = None,
    ) -> Optional[ChatMessage]:
        """Run one extraction turn. Returns the assistant reply, or None for blank input."""
        if not text or not text.strip():
            return None
        if self.busy:
            raise RequestInFlight("An extraction request is already running")

        self.touch()
        self.busy = True
        self.messages.append(ChatMessage(role="user", content=text))
        logger.info(f"Session {self.id} extracting from: {text[:50]}...")

        try:
            extractor = self._extractor_factory(self._api_key)
            drafts = await asyncio.to_thread(
                extractor.extract, text, subjects, reference_date or date.today()
            )
        except (UpstreamError, ParseError) as e:
            logger.warning(f"Session {self.id} extraction failed: {type(e).__name__}: {e}")
            self.last_error = type(e).__name__
            return self._say(
                f"Sorry, I encountered an error: {e}. Please check your API key and try again."
            )
        finally:
            self.busy = False

        self.last_error = None
        self.drafts = drafts
        return self._say(
            f"I've analyzed your input and generated {len(drafts)} material(s). "
            "Please review them below and create the ones you'd like to add to your schedule."
        )

    def touch(self) -> None:
        self.last_used = time.monotonic()

    def _draft(self, index: int) -> MaterialDraft:
        self.touch()
        if index < 0 or index >= len(self.drafts):
            raise IndexError(f"no draft at index {index}")
        return self.drafts[index]

    async def confirm(self, index: int) -> Material:
        """Persist one draft; the others stay pending whatever happens here."""
        draft = self._draft(index)
        material = await self.materials.create(draft.to_material())
        # identity check: equal-looking drafts may coexist
        self.drafts = [d for d in self.drafts if d is not draft]
        return material

    def discard(self, index: int) -> MaterialDraft:
        draft = self._draft(index)
        self.drafts = [d for d in self.drafts if d is not draft]
        return draft
