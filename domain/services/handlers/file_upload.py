from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Awaitable

from domain.models import DocumentType, FieldGroup, FieldType
from domain.ports import ElementPort
from domain.services.cover_letter import CoverLetterArtifactGenerator
from domain.services.document_type import DocumentTypeDetector
from domain.services.handlers.base import FieldHandler, HandlerContext
from domain.utils import normalize_text

_UPLOAD_TEXT = re.compile(r"upload|attach|televerser|telecharger|importer|hochladen|subir|adjuntar", re.IGNORECASE)


class FileUploadHandler(FieldHandler):
    """
    Resume and cover letter uploads.

    Before uploading, a document that is already attached or listed among
    earlier uploads is reused. A tailored resume may be computed in the
    background; it is awaited only when a resume file is actually needed.
    """

    field_type = FieldType.FILE_UPLOAD

    def __init__(
        self,
        ctx: HandlerContext,
        *,
        resume_path: str,
        detector: DocumentTypeDetector,
        cover_letter_path: str | None = None,
        cover_letter_generator: CoverLetterArtifactGenerator | None = None,
    ) -> None:
        super().__init__(ctx)
        self._resume_path = resume_path
        self._cover_letter_path = cover_letter_path
        self._detector = detector
        self._cover_letter_generator = cover_letter_generator
        self._pending_resume: Awaitable[str | None] | None = None
        self._tailored_resume: str | None = None

    def set_pending_resume(self, pending: Awaitable[str | None] | None) -> None:
        self._pending_resume = pending
        self._tailored_resume = None

    async def can_handle(self, group: FieldGroup) -> bool:
        container = group.container
        if await container.query('input[type="file"]') is not None:
            return True
        if await container.query(self._utils.selectors.upload_hooks) is not None:
            return True
        marker = (await container.get_attribute("class") or "") + " " + (
            await container.get_attribute("data-test-document-upload") or ""
        )
        if "jobs-document-upload" in marker or "jobs-resume-picker" in marker:
            return True
        return await self._upload_button(container) is not None

    async def handle(self, group: FieldGroup) -> bool:
        container = group.container
        file_input = await container.query('input[type="file"]')
        detected = await self._detector.detect(file_input, group.question)

        if detected.document_type is DocumentType.OTHER:
            self._logger.info("upload_skipped_other_document", question=group.question, token=detected.matched_token)
            return True
        if detected.document_type is DocumentType.COVER_LETTER:
            return await self._handle_cover_letter(container, file_input)
        return await self._handle_resume(container, file_input)

    # -- resume -------------------------------------------------------------

    async def _handle_resume(self, container: ElementPort, file_input: ElementPort | None) -> bool:
        if self._pending_resume is None and self._tailored_resume is None:
            filename = Path(self._resume_path).name
            if await self._already_uploaded(container):
                await self._ensure_selected(container, filename)
                return True
            if await self._select_card(container, filename):
                self._logger.info("resume_reused", filename=filename)
                return True

        path = await self._resolve_resume_path()
        if not await self._upload(container, file_input, path):
            return False
        await self._ensure_selected(container, Path(path).name)
        return True

    async def _resolve_resume_path(self) -> str:
        if self._tailored_resume is not None:
            return self._tailored_resume
        if self._pending_resume is None:
            return self._resume_path

        pending, self._pending_resume = self._pending_resume, None
        timeout = self._ctx.config.pending_resume_timeout_ms / 1000
        try:
            tailored = await asyncio.wait_for(pending, timeout=timeout)
        except asyncio.TimeoutError:
            self._logger.warning("tailored_resume_timeout", timeout_s=timeout)
            return self._resume_path
        except Exception as exc:
            self._logger.warning("tailored_resume_failed", error=str(exc))
            return self._resume_path
        if not tailored:
            return self._resume_path
        self._tailored_resume = tailored
        self._logger.info("tailored_resume_ready", path=tailored)
        return tailored

    # -- cover letter -------------------------------------------------------

    async def _handle_cover_letter(self, container: ElementPort, file_input: ElementPort | None) -> bool:
        if await self._already_uploaded(container):
            return True
        path = self._cover_letter_path
        if path is None and self._cover_letter_generator is not None:
            path = await self._cover_letter_generator.generate()
        if path is None:
            self._logger.warning("cover_letter_unavailable")
            return False
        return await self._upload(container, file_input, path)

    # -- shared -------------------------------------------------------------

    async def _upload(self, container: ElementPort, file_input: ElementPort | None, path: str) -> bool:
        delays = self._utils.delays
        if file_input is not None:
            await file_input.set_input_files(path)
            await self._utils.pause(delays.upload_ms)
            self._logger.info("file_uploaded", path=path)
            return True
        button = await self._upload_button(container)
        if button is None:
            self._logger.warning("upload_control_missing", path=path)
            return False
        uploaded = await self._utils.page.upload_via_file_chooser(button, path)
        if uploaded:
            await self._utils.pause(delays.upload_ms)
            self._logger.info("file_uploaded", path=path, via="file_chooser")
        return uploaded

    async def _already_uploaded(self, container: ElementPort) -> bool:
        for selector in self._utils.selectors.uploaded_markers:
            for marker in await container.query_all(selector):
                if (await marker.visible_text()).strip():
                    return True
        return False

    async def _select_card(self, container: ElementPort, filename: str) -> bool:
        card = await self._matching_card(container, filename)
        if card is None:
            return False
        if not await self._card_selected(card):
            await self._utils.safe_click(card)
        return True

    async def _ensure_selected(self, container: ElementPort, filename: str) -> None:
        """With several resume cards, make sure the one for ``filename`` is selected."""
        cards = await container.query_all(self._utils.selectors.upload_cards)
        if len(cards) <= 1:
            return
        card = await self._matching_card(container, filename)
        if card is None:
            self._logger.warning("resume_card_not_found", filename=filename)
            return
        if not await self._card_selected(card):
            await self._utils.safe_click(card)
            self._logger.info("resume_card_selected", filename=filename)

    async def _matching_card(self, container: ElementPort, filename: str) -> ElementPort | None:
        wanted = normalize_text(filename)
        stem = normalize_text(Path(filename).stem)
        for card in await container.query_all(self._utils.selectors.upload_cards):
            text = normalize_text(await card.visible_text())
            if wanted in text or (stem and stem in text):
                return card
        return None

    @staticmethod
    async def _card_selected(card: ElementPort) -> bool:
        if (await card.get_attribute("aria-checked") or "").lower() == "true":
            return True
        if "selected" in (await card.get_attribute("class") or ""):
            return True
        radio = await card.query('input[type="radio"]')
        return radio is not None and await radio.is_checked()

    @staticmethod
    async def _upload_button(container: ElementPort) -> ElementPort | None:
        for button in await container.query_all('button, [role="button"]'):
            if _UPLOAD_TEXT.search(await button.visible_text() or ""):
                return button
        return None
