from __future__ import annotations
import json
import re
from datetime import date, timedelta

from llm.providers.base import LLMProvider

_TODAY_RE = re.compile(r"Today's date: .*?\((\d{4}-\d{2}-\d{2})")


class MockProvider(LLMProvider):
    """Offline provider for local development (LLM_PROVIDER=mock)."""

    def generate(self, *, system: str, user: str) -> str:
        """
        Returns one material per non-empty line of the user text, due a week
        after the date the prompt was grounded on.
        """
        m = _TODAY_RE.search(system)
        today = date.fromisoformat(m.group(1)) if m else date.today()
        due = (today + timedelta(days=7)).isoformat()

        materials = [
            {
                "title": line.strip()[:80],
                "description": line.strip(),
                "subjectId": None,
                "date": due,
            }
            for line in user.splitlines()
            if line.strip()
        ]
        return "Here are your materials:\n" + json.dumps(materials, indent=2)
