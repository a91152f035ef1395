from __future__ import annotations

import re

from domain.models import DocumentType, DocumentTypeResult
from domain.ports import ElementPort, LoggerPort
from domain.utils import normalize_text

_URN_PATTERN = re.compile(r"upload-([a-z-]+)-urn")
_GENERIC_UPLOAD_ID = "jobs-document-upload-file-input-urn"

COVER_LETTER_ATTRIBUTE_KEYWORDS = (
    "cover",
    "coverletter",
    "cover-letter",
    "lettre",
    "motivation",
    "anschreiben",
    "bewerbung",
    "carta",
    "presentacion",
    "lettera",
    "presentazione",
    "carta-apresentacao",
)
RESUME_ATTRIBUTE_KEYWORDS = ("resume", "cv", "lebenslauf", "curriculum")

COVER_LETTER_TEXT_KEYWORDS = (
    "cover letter",
    "coverletter",
    "lettre de motivation",
    "lettre motivation",
    "anschreiben",
    "motivationsschreiben",
    "carta de presentacion",
    "carta presentacion",
    "lettera di presentazione",
    "carta de apresentacao",
)
RESUME_TEXT_KEYWORDS = ("resume", "cv", "lebenslauf", "curriculum")


class DocumentTypeDetector:
    """Decide whether an upload field wants the resume, a cover letter or something else."""

    def __init__(self, logger: LoggerPort | None = None) -> None:
        self._logger = logger

    async def detect(self, element: ElementPort | None, question: str = "") -> DocumentTypeResult:
        element_id = ""
        attributes = ""
        if element is not None:
            element_id = (await element.get_attribute("id") or "").lower()
            name = (await element.get_attribute("name") or "").lower()
            aria = (await element.get_attribute("aria-label") or "").lower()
            attributes = " ".join((element_id, name, aria))

        result = self.classify(element_id=element_id, attributes=attributes, question=question)
        if self._logger is not None:
            self._logger.debug(
                "document_type_detected",
                document_type=result.document_type.value,
                detected_by=result.detected_by,
            )
        return result

    @staticmethod
    def classify(*, element_id: str = "", attributes: str = "", question: str = "") -> DocumentTypeResult:
        """Pure classification over already-extracted strings."""
        urn = _URN_PATTERN.search(element_id)
        if urn:
            token = urn.group(1)
            if "cover" in token or "letter" in token:
                return DocumentTypeResult(DocumentType.COVER_LETTER, "urn-pattern", token)
            if "resume" in token or "cv" in token:
                return DocumentTypeResult(DocumentType.RESUME, "urn-pattern", token)

        # Resume inputs always carry an explicit marker; a bare generic id is the secondary document.
        if _GENERIC_UPLOAD_ID in element_id and "upload-resume" not in element_id:
            return DocumentTypeResult(DocumentType.COVER_LETTER, "urn-pattern", _GENERIC_UPLOAD_ID)
        if urn:
            return DocumentTypeResult(DocumentType.OTHER, "urn-pattern", urn.group(1))

        for keyword in COVER_LETTER_ATTRIBUTE_KEYWORDS:
            if keyword in attributes:
                return DocumentTypeResult(DocumentType.COVER_LETTER, "attribute", keyword)
        for keyword in RESUME_ATTRIBUTE_KEYWORDS:
            if _word_in(keyword, attributes):
                return DocumentTypeResult(DocumentType.RESUME, "attribute", keyword)

        text = normalize_text(question)
        for keyword in COVER_LETTER_TEXT_KEYWORDS:
            if keyword in text:
                return DocumentTypeResult(DocumentType.COVER_LETTER, "question-text", keyword)
        for keyword in RESUME_TEXT_KEYWORDS:
            if _word_in(keyword, text):
                return DocumentTypeResult(DocumentType.RESUME, "question-text", keyword)

        return DocumentTypeResult(DocumentType.RESUME, "default")


def _word_in(keyword: str, text: str) -> bool:
    return re.search(r"(?<![a-z])" + re.escape(keyword) + r"(?![a-z])", text) is not None
