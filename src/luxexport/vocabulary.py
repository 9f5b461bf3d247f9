"""
Vocabulary service access.

The pipeline consumes the VocabularyService protocol only. HttpVocabularyClient
implements it against the vocabulary REST API with requests; tests and
offline runs can pass any object with the same three methods.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests
from pydantic import ValidationError

from .domain.models import Vocabulary, VocabularyRecord
from .types import VocabularyServiceError

logger = logging.getLogger(__name__)


class VocabularyService(Protocol):
    """Lookup contract of the controlled-vocabulary service."""

    def get_record(self, vocabulary_id: int, record_id: int) -> Optional[VocabularyRecord]: ...
    def get_vocabulary_by_id(self, vocabulary_id: int) -> Optional[Vocabulary]: ...
    def get_all_records(self, vocabulary: Vocabulary) -> None: ...


class HttpVocabularyClient:
    """
    VocabularyService backed by the vocabulary REST API.

    Endpoints:
        GET {api_url}/vocabularies/{id}
        GET {api_url}/vocabularies/{id}/records
        GET {api_url}/vocabularies/{id}/records/{record_id}

    A 404 answer means "absent" and yields None; every other failure is
    raised as VocabularyServiceError. No retries are attempted.
    """

    def __init__(self, api_url: str, timeout: Optional[float] = 30.0, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            api_url: Base URL of the vocabulary API
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional preconfigured requests session
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str) -> Optional[Any]:
        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as e:
            raise VocabularyServiceError(f"Vocabulary service request failed for {url}: {e}") from e

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            raise VocabularyServiceError(f"Vocabulary service answered {response.status_code} for {url}") from e
        except ValueError as e:
            raise VocabularyServiceError(f"Vocabulary service returned invalid JSON for {url}") from e

    def get_record(self, vocabulary_id: int, record_id: int) -> Optional[VocabularyRecord]:
        payload = self._get(f"vocabularies/{vocabulary_id}/records/{record_id}")
        if payload is None:
            return None
        return _parse_record(payload, vocabulary_id)

    def get_vocabulary_by_id(self, vocabulary_id: int) -> Optional[Vocabulary]:
        payload = self._get(f"vocabularies/{vocabulary_id}")
        if payload is None:
            return None
        try:
            return Vocabulary(id=payload.get("id", vocabulary_id), title=payload.get("title", ""))
        except ValidationError as e:
            raise VocabularyServiceError(f"Invalid vocabulary {vocabulary_id}: {e}") from e

    def get_all_records(self, vocabulary: Vocabulary) -> None:
        """Load every record of the vocabulary into vocabulary.records."""
        payload = self._get(f"vocabularies/{vocabulary.id}/records") or []
        if isinstance(payload, dict):
            payload = payload.get("records", [])
        vocabulary.records = [_parse_record(item, vocabulary.id) for item in payload]
        logger.debug(f"Loaded {len(vocabulary.records)} records of vocabulary {vocabulary.id}")

    def close(self) -> None:
        self.session.close()


def _parse_record(payload: dict, vocabulary_id: int) -> VocabularyRecord:
    data = dict(payload)
    data.setdefault("vocabularyId", vocabulary_id)
    try:
        return VocabularyRecord.model_validate(data)
    except ValidationError as e:
        raise VocabularyServiceError(f"Invalid record in vocabulary {vocabulary_id}: {e}") from e
