from __future__ import annotations

import logging
from dataclasses import dataclass

from siarni.core.errors import ExtractionError
from siarni.infrastructure.ai.gemini_extractor import DocumentPart, GeminiExtractor

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 4


@dataclass(slots=True)
class ExtractedFields:
    husband_name: str
    wife_name: str
    marriage_date: str
    nomor_nb: str
    nomor_akta: str
    full_text: str


class ExtractionService:
    """Proposes record fields from scanned pages; staff review them before saving."""

    def __init__(self, extractor: GeminiExtractor) -> None:
        self.extractor = extractor

    def extract(self, documents: list[DocumentPart]) -> ExtractedFields:
        if not documents:
            raise ExtractionError("No documents supplied for extraction")
        if len(documents) > MAX_DOCUMENTS:
            logger.info("Only the first %d of %d documents are sent for extraction", MAX_DOCUMENTS, len(documents))

        payload = self.extractor.extract(documents[:MAX_DOCUMENTS])
        logger.info("Extracted fields with %s from %d document(s)", self.extractor.model_name, len(documents))

        return ExtractedFields(
            husband_name=_text(payload.get("husbandName")),
            wife_name=_text(payload.get("wifeName")),
            marriage_date=_text(payload.get("marriageDate")),
            nomor_nb=_text(payload.get("nomorNB")),
            nomor_akta=_text(payload.get("nomorAkta")),
            full_text=_text(payload.get("fullText")),
        )


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""
