from __future__ import annotations

import asyncio
from typing import Awaitable

from domain.errors import NavigationError
from domain.models import (
    CandidateProfile,
    ModalState,
    RunContext,
    WizardConfig,
    WizardOutcome,
    WizardResult,
    WizardSelectors,
)
from domain.ports import (
    AnswerGeneratorPort,
    ClockPort,
    LoggerPort,
    StatusObserverPort,
    WizardPagePort,
)
from domain.services.answer_cache import AnswerCache
from domain.services.cover_letter import CoverLetterArtifactGenerator
from domain.services.debug import DebugRunManager
from domain.services.dispatcher import FieldDispatcher
from domain.services.form_utils import FormUtils
from domain.services.handlers import HandlerContext
from domain.services.navigation import NavigationStateMachine
from domain.services.smart_matcher import SmartFieldMatcher
from domain.services.status import StatusReporter


class WizardSession:
    """
    Fills and advances one application wizard until it reaches a terminal state.

    Pages are handled strictly one after another. The stop event is checked
    between page transitions.
    """

    def __init__(
        self,
        *,
        dispatcher: FieldDispatcher,
        navigator: NavigationStateMachine,
        page: WizardPagePort,
        logger: LoggerPort,
        config: WizardConfig | None = None,
        reporter: StatusReporter | None = None,
        debug_manager: DebugRunManager | None = None,
        run_context: RunContext | None = None,
        cover_letter_generator: CoverLetterArtifactGenerator | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._navigator = navigator
        self._page = page
        self._logger = logger
        self._config = config or WizardConfig()
        self._reporter = reporter or StatusReporter(logger=logger)
        self._debug_manager = debug_manager
        self._run_context = run_context or RunContext(run_id="wizard")
        self._cover_letters = cover_letter_generator

    @classmethod
    def create(
        cls,
        *,
        page: WizardPagePort,
        profile: CandidateProfile,
        answers: AnswerGeneratorPort,
        cache: AnswerCache,
        clock: ClockPort,
        logger: LoggerPort,
        resume_path: str,
        cover_letter_path: str | None = None,
        config: WizardConfig | None = None,
        selectors: WizardSelectors | None = None,
        observer: StatusObserverPort | None = None,
        debug_manager: DebugRunManager | None = None,
        run_context: RunContext | None = None,
    ) -> WizardSession:
        """Wire one session's collaborators around a single page and cache."""
        config = config or WizardConfig()
        utils = FormUtils(page=page, logger=logger, config=config, selectors=selectors)
        ctx = HandlerContext(
            utils=utils,
            cache=cache,
            answers=answers,
            matcher=SmartFieldMatcher(profile, logger),
            logger=logger,
        )
        generator = None
        if cover_letter_path is None:
            generator = CoverLetterArtifactGenerator(answers=answers, page=page, clock=clock, logger=logger)
        dispatcher = FieldDispatcher.build(
            ctx,
            resume_path=resume_path,
            cover_letter_path=cover_letter_path,
            cover_letter_generator=generator,
        )
        return cls(
            dispatcher=dispatcher,
            navigator=NavigationStateMachine(utils=utils, logger=logger),
            page=page,
            logger=logger,
            config=config,
            reporter=StatusReporter(observer, logger=logger),
            debug_manager=debug_manager,
            run_context=run_context,
            cover_letter_generator=generator,
        )

    @property
    def dispatcher(self) -> FieldDispatcher:
        return self._dispatcher

    @property
    def navigator(self) -> NavigationStateMachine:
        return self._navigator

    @property
    def reporter(self) -> StatusReporter:
        return self._reporter

    def set_pending_resume(self, pending: Awaitable[str | None]) -> None:
        """Register a tailored resume that is still being produced."""
        self._dispatcher.set_pending_resume(pending)

    async def run(self, stop_event: asyncio.Event | None = None) -> WizardResult:
        try:
            return await self._drive(stop_event)
        finally:
            if self._cover_letters is not None:
                self._cover_letters.cleanup()

    async def _drive(self, stop_event: asyncio.Event | None) -> WizardResult:
        stats = self._reporter.stats
        retries = 0
        state = ModalState.UNKNOWN
        if self._debug_manager is not None:
            self._debug_manager.start(self._run_context)
        self._reporter.publish("wizard", "started")

        try:
            for step in range(1, self._config.max_pages + 1):
                if stop_event is not None and stop_event.is_set():
                    return await self._finish(WizardOutcome.STOPPED, state, error="Stop requested")
                if not await self._navigator.is_modal_open():
                    return await self._finish(WizardOutcome.COMPLETED, ModalState.CLOSED)

                self._reporter.publish("page", "filling", page_index=self._navigator.page_index)
                filled = await self._dispatcher.process_page()
                stats.fields_filled += filled.fields_processed - filled.fields_failed
                stats.fields_failed += filled.fields_failed
                stats.fields_skipped += len(filled.skipped_questions)
                self._reporter.publish(
                    "page",
                    "filled",
                    page_index=self._navigator.page_index,
                    processed=filled.fields_processed,
                    failed=filled.fields_failed,
                )
                await self._capture(f"page_{self._navigator.page_index + 1}_filled")

                if self._config.dry_run and await self._navigator.primary_is_submit():
                    self._logger.info("dry_run_stop_before_submit", page_index=self._navigator.page_index)
                    await self._navigator.close_modal()
                    return await self._finish(WizardOutcome.DRY_RUN, ModalState.SUBMIT)

                result = await self._navigator.advance()
                stats.primary_clicks += 1
                state = result.state

                if result.state is ModalState.SUCCESS:
                    stats.pages_completed += 1
                    outcome = WizardOutcome.SUBMITTED if result.submitted else WizardOutcome.COMPLETED
                    return await self._finish(outcome, ModalState.SUCCESS)

                if not result.success:
                    if retries < self._config.max_page_retries:
                        retries += 1
                        self._dispatcher.set_retry_mode(True)
                        self._logger.info("page_retry", step=step, attempt=retries, error=result.error)
                        self._reporter.publish("page", "retrying", result.error or "", attempt=retries)
                        continue
                    return await self._finish(WizardOutcome.FAILED, result.state, error=result.error)

                retries = 0
                self._dispatcher.set_retry_mode(False)
                stats.pages_completed += 1
                await self._navigator.wait_for_modal_ready()

            return await self._finish(
                WizardOutcome.FAILED,
                state,
                error=f"Wizard not finished after {self._config.max_pages} pages",
            )
        except NavigationError as exc:
            self._logger.error("wizard_navigation_failed", error=str(exc), state=exc.state)
            failed_state = ModalState(exc.state) if exc.state else ModalState.UNKNOWN
            return await self._finish(WizardOutcome.FAILED, failed_state, error=str(exc))

    async def _capture(self, step_name: str) -> None:
        if self._debug_manager is None:
            return
        try:
            await self._debug_manager.capture_step(self._run_context, self._page, step_name)
        except Exception as exc:
            self._logger.warning("debug_capture_failed", step_name=step_name, error=str(exc))

    async def _finish(
        self,
        outcome: WizardOutcome,
        state: ModalState,
        *,
        error: str | None = None,
    ) -> WizardResult:
        stats = self._reporter.stats
        result = WizardResult(
            outcome=outcome,
            final_state=state,
            pages_completed=stats.pages_completed,
            primary_clicks=stats.primary_clicks,
            fields_processed=stats.fields_filled + stats.fields_failed,
            fields_failed=stats.fields_failed,
            error=error,
        )
        self._dispatcher.set_retry_mode(False)
        self._reporter.publish("wizard", "finished", error or "", outcome=outcome.value)
        log = self._logger.info if result.success else self._logger.warning
        log("wizard_finished", outcome=outcome.value, state=state.value, **stats.snapshot())
        if self._debug_manager is not None:
            await self._capture("final")
            self._debug_manager.finish(
                self._run_context,
                {"run_id": self._run_context.run_id, "outcome": outcome.value, "error": error, **stats.snapshot()},
            )
        return result
