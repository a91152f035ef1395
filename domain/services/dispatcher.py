from __future__ import annotations

from typing import Awaitable, Sequence

from domain.models import FieldGroup, PageFillResult
from domain.ports import ElementPort, LoggerPort
from domain.services.cover_letter import CoverLetterArtifactGenerator
from domain.services.document_type import DocumentTypeDetector
from domain.services.form_utils import FormUtils
from domain.services.handlers import (
    CheckboxHandler,
    DateHandler,
    DropdownHandler,
    FieldHandler,
    FileUploadHandler,
    HandlerContext,
    RadioHandler,
    TextareaHandler,
    TextHandler,
    TypeaheadHandler,
    extract_question_text,
)

_SCROLL_STEP_PX = 400


class FieldDispatcher:
    """
    Finds the field groups of the current wizard page and hands each one
    to the first handler that accepts it.

    Handlers are consulted in a fixed priority order so a group matching
    several predicates always lands on the same handler.
    """

    def __init__(
        self,
        *,
        utils: FormUtils,
        handlers: Sequence[FieldHandler],
        logger: LoggerPort,
    ) -> None:
        self._utils = utils
        self._handlers = list(handlers)
        self._logger = logger

    @classmethod
    def build(
        cls,
        ctx: HandlerContext,
        *,
        resume_path: str,
        cover_letter_path: str | None = None,
        cover_letter_generator: CoverLetterArtifactGenerator | None = None,
        detector: DocumentTypeDetector | None = None,
    ) -> FieldDispatcher:
        handlers: list[FieldHandler] = [
            FileUploadHandler(
                ctx,
                resume_path=resume_path,
                detector=detector or DocumentTypeDetector(ctx.logger),
                cover_letter_path=cover_letter_path,
                cover_letter_generator=cover_letter_generator,
            ),
            CheckboxHandler(ctx),
            RadioHandler(ctx),
            DropdownHandler(ctx),
            DateHandler(ctx),
            TypeaheadHandler(ctx),
            TextareaHandler(ctx),
            TextHandler(ctx),
        ]
        return cls(utils=ctx.utils, handlers=handlers, logger=ctx.logger)

    @property
    def handlers(self) -> list[FieldHandler]:
        return list(self._handlers)

    def set_retry_mode(self, enabled: bool) -> None:
        for handler in self._handlers:
            if isinstance(handler, CheckboxHandler):
                handler.set_retry_mode(enabled)

    def set_pending_resume(self, pending: Awaitable[str | None] | None) -> None:
        for handler in self._handlers:
            if isinstance(handler, FileUploadHandler):
                handler.set_pending_resume(pending)

    async def classify(self, group: FieldGroup) -> FieldHandler | None:
        for handler in self._handlers:
            try:
                if await handler.can_handle(group):
                    return handler
            except Exception as exc:
                self._logger.debug("can_handle_failed", handler=handler.name, error=str(exc))
        return None

    async def find_groups(self) -> list[FieldGroup]:
        root = await self._root()
        groups: list[FieldGroup] = []
        seen: set[str] = set()
        for selector in self._utils.selectors.form_sections:
            containers = await (root.query_all(selector) if root is not None else self._utils.page.query_all(selector))
            for container in containers:
                if not await container.is_visible():
                    continue
                key = await self._utils.stable_key(container)
                if key in seen:
                    continue
                seen.add(key)
                question = await extract_question_text(container)
                groups.append(FieldGroup(container=container, question=question, key=key))
        return groups

    async def process_page(self) -> PageFillResult:
        """Fill every group on the page, rescanning for groups revealed by earlier answers."""
        handled: set[str] = set()
        processed = failed = 0
        skipped: list[str] = []
        errors: list[str] = []

        for scan in range(1, self._utils.config.max_fill_passes + 1):
            fresh = [g for g in await self.find_groups() if g.key not in handled]
            if not fresh:
                break
            self._logger.debug("page_scan", scan=scan, groups=len(fresh))

            for group in fresh:
                handled.add(group.key)
                handler = await self.classify(group)
                if handler is None:
                    skipped.append(group.question)
                    self._logger.info("field_unclassified", question=group.question)
                    continue

                try:
                    ok = await handler.handle(group)
                except Exception as exc:
                    ok = False
                    errors.append(f"{group.question}: {exc}")
                    self._logger.error(
                        "field_handler_crashed",
                        handler=handler.name,
                        question=group.question,
                        error=str(exc),
                    )
                processed += 1
                if ok:
                    self._logger.info("field_handled", handler=handler.name, question=group.question)
                else:
                    failed += 1
                    self._logger.warning("field_failed", handler=handler.name, question=group.question)

            root = await self._root()
            if root is not None:
                await root.scroll_by(_SCROLL_STEP_PX)

        return PageFillResult(
            fields_processed=processed,
            fields_failed=failed,
            skipped_questions=tuple(skipped),
            errors=tuple(errors),
        )

    async def _root(self) -> ElementPort | None:
        return await self._utils.page.query(self._utils.selectors.modal)
