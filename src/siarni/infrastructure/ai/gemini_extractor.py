from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from siarni.core.errors import ConfigurationError, ExtractionError

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Analisa foto dokumen Akta Nikah/Buku Nikah dari Indonesia ini.
Ekstrak informasi berikut dengan akurat:
1. Nama Lengkap Suami
2. Nama Lengkap Istri
3. Tanggal Pernikahan (konversi ke format YYYY-MM-DD, contoh: 03 Januari 2025 menjadi 2025-01-03)
4. Nomor NB (Nomor Berkas/Perforasi di pojok)
5. Nomor Akta Nikah (Nomor pendaftaran resmi)
6. Transkrip lengkap teks yang ada di dokumen.

PENTING: Jika ada informasi yang tidak terbaca, kosongkan saja stringnya."""


class ExtractionSchema(BaseModel):
    # All optional: an unreadable field comes back empty instead of failing the call.
    husbandName: str | None = None
    wifeName: str | None = None
    marriageDate: str | None = None
    nomorNB: str | None = None
    nomorAkta: str | None = None
    fullText: str | None = None


@dataclass(slots=True)
class DocumentPart:
    data: bytes
    mime_type: str


@dataclass(slots=True)
class GeminiConfig:
    api_key: str | None
    model: str


class GeminiExtractor:
    def __init__(self, config: GeminiConfig) -> None:
        self.config = config
        self._client = None

    @property
    def model_name(self) -> str:
        return self.config.model

    def extract(self, documents: list[DocumentPart]) -> dict[str, Any]:
        client = self._load_client()
        from google.genai import types

        parts = [types.Part.from_bytes(data=doc.data, mime_type=doc.mime_type) for doc in documents]
        parts.append(types.Part.from_text(text=EXTRACTION_PROMPT))

        try:
            response = client.models.generate_content(
                model=self.config.model,
                contents=parts,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=ExtractionSchema,
                ),
            )
        except Exception as exc:
            logger.exception("Gemini extraction request failed")
            raise ExtractionError(str(exc) or "Unknown AI error") from exc

        text = getattr(response, "text", None)
        if not text:
            raise ExtractionError("AI returned an empty response (possibly blocked by a safety filter)")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"AI returned malformed JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ExtractionError("AI response is not a JSON object")
        return payload

    def _load_client(self):
        if self._client is not None:
            return self._client
        if not self.config.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured; AI extraction is unavailable.")
        try:
            from google import genai
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError(
                "AI extraction dependencies are missing. Install with `pip install -e .`."
            ) from exc
        self._client = genai.Client(api_key=self.config.api_key)
        return self._client
