from types import SimpleNamespace

import pytest

from siarni.application.services.extraction_service import ExtractionService
from siarni.core.errors import ConfigurationError, ExtractionError
from siarni.infrastructure.ai.gemini_extractor import DocumentPart, GeminiConfig, GeminiExtractor


class FakeExtractor:
    model_name = "fake-model"

    def __init__(self, payload: dict[str, object]) -> None:
        self.payload = payload
        self.calls: list[list[DocumentPart]] = []

    def extract(self, documents: list[DocumentPart]) -> dict[str, object]:
        self.calls.append(documents)
        return self.payload


def test_extract_maps_fields_and_blanks_missing_values() -> None:
    fake = FakeExtractor(
        {
            "husbandName": " Ahmad Sutrisno ",
            "wifeName": "Siti Aminah",
            "marriageDate": "2024-05-01",
            "nomorAkta": "045/2024",
            "nomorNB": None,
            "fullText": "KUTIPAN AKTA NIKAH ...",
        }
    )

    fields = ExtractionService(fake).extract([DocumentPart(data=b"img", mime_type="image/jpeg")])

    assert fields.husband_name == "Ahmad Sutrisno"
    assert fields.wife_name == "Siti Aminah"
    assert fields.marriage_date == "2024-05-01"
    assert fields.nomor_akta == "045/2024"
    assert fields.nomor_nb == ""
    assert fields.full_text == "KUTIPAN AKTA NIKAH ..."


def test_extract_sends_at_most_four_documents() -> None:
    fake = FakeExtractor({})
    docs = [DocumentPart(data=f"page {i}".encode(), mime_type="image/jpeg") for i in range(6)]

    ExtractionService(fake).extract(docs)

    assert len(fake.calls[0]) == 4


def test_extract_requires_documents() -> None:
    with pytest.raises(ExtractionError):
        ExtractionService(FakeExtractor({})).extract([])


def test_gemini_extractor_requires_api_key() -> None:
    extractor = GeminiExtractor(GeminiConfig(api_key=None, model="gemini-2.5-flash"))
    with pytest.raises(ConfigurationError):
        extractor.extract([DocumentPart(data=b"img", mime_type="image/jpeg")])


class FakeModels:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.requests: list[dict[str, object]] = []

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def _extractor_with(models: FakeModels) -> GeminiExtractor:
    extractor = GeminiExtractor(GeminiConfig(api_key="test-key", model="gemini-2.5-flash"))
    extractor._client = SimpleNamespace(models=models)
    return extractor


def test_gemini_extractor_returns_json_object() -> None:
    models = FakeModels(text='{"husbandName": "Ahmad Sutrisno", "nomorAkta": "045/2024"}')

    payload = _extractor_with(models).extract([DocumentPart(data=b"img", mime_type="image/jpeg")])

    assert payload == {"husbandName": "Ahmad Sutrisno", "nomorAkta": "045/2024"}
    assert models.requests[0]["model"] == "gemini-2.5-flash"
    assert len(models.requests[0]["contents"]) == 2


@pytest.mark.parametrize(
    ("models", "message"),
    [
        (FakeModels(text=None), "empty response"),
        (FakeModels(text=""), "empty response"),
        (FakeModels(text="{not json"), "malformed JSON"),
        (FakeModels(text='["Ahmad", "Siti"]'), "not a JSON object"),
        (FakeModels(error=RuntimeError("quota exceeded")), "quota exceeded"),
    ],
    ids=["none", "blank", "malformed", "array", "request_failure"],
)
def test_gemini_extractor_rejects_unusable_responses(models: FakeModels, message: str) -> None:
    extractor = _extractor_with(models)

    with pytest.raises(ExtractionError, match=message):
        extractor.extract([DocumentPart(data=b"img", mime_type="image/jpeg")])
