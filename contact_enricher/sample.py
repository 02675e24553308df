"""Offline API client that serves canned responses from local data."""
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Subject


class StaticResponseClient:
    """Returns fixed contact/person responses without touching the network.

    Responses can be passed directly or loaded from a JSON file with
    ``contact`` and ``person`` keys. Every call is recorded in :attr:`calls`
    as ``(endpoint, subject)``.
    """

    def __init__(
        self,
        contact_response: Optional[Dict[str, Any]] = None,
        person_response: Optional[Dict[str, Any]] = None,
        responses_path: Optional[str] = None,
    ) -> None:
        if responses_path:
            data = json.loads(Path(responses_path).read_text(encoding="utf-8"))
            contact_response = contact_response or data.get("contact")
            person_response = person_response or data.get("person")
        self._contact_response = contact_response or {}
        self._person_response = person_response or {}
        self.calls: List[tuple[str, Subject]] = []

    def enrich_contact(self, subject: Subject) -> Dict[str, Any]:
        self.calls.append(("contact", subject))
        return copy.deepcopy(self._contact_response)

    def search_person(self, subject: Subject) -> Dict[str, Any]:
        self.calls.append(("person", subject))
        return copy.deepcopy(self._person_response)
