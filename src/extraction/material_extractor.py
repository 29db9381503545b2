import logging
from datetime import date
from typing import List, Optional, Sequence

from extraction.date_repair import repair_date
from extraction.prompt_builder import build_extraction_prompt
from extraction.response_parser import parse_materials
from extraction.subject_resolver import resolve_subject_id
from llm.llm_client import LLMClient
from study_schedule import config
from study_schedule.models import MaterialDraft, Subject

logger = logging.getLogger(__name__)


class MaterialExtractor:
    """Free text -> material drafts, via one round trip to the configured LLM."""

    def __init__(self, llm_client: Optional[LLMClient] = None, strict_json: Optional[bool] = None):
        self.llm = llm_client or LLMClient()
        self.strict_json = config.LLM_STRICT_JSON if strict_json is None else strict_json

    def extract(
        self,
        text: str,
        subjects: Sequence[Subject],
        reference_date: Optional[date] = None,
    ) -> List[MaterialDraft]:
        reference_date = reference_date or date.today()
        system = build_extraction_prompt(subjects, reference_date)

        raw = self.llm.complete(system, text)
        items = parse_materials(raw, strict=self.strict_json)

        drafts = [
            MaterialDraft(
                title=item.title,
                description=item.description,
                subject_id=resolve_subject_id(item.subject_id, subjects),
                date=repair_date(item.date, reference_date),
            )
            for item in items
        ]
        logger.info(f"Extracted {len(drafts)} material draft(s) (reference date {reference_date})")
        return drafts
