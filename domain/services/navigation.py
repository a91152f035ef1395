from __future__ import annotations

import re

from domain.errors import NavigationError
from domain.models import FieldGroup, ModalState, NavigationResult, ValidationError
from domain.ports import ElementPort, LoggerPort
from domain.services.form_utils import FormUtils
from domain.services.handlers import extract_question_text
from domain.utils import dedupe_doubled_text, normalize_text

SUBMIT_WORDS = ("submit", "soumettre", "envoyer", "absenden", "senden", "enviar", "invia")
REVIEW_WORDS = ("review", "verifier", "uberprufen", "revisar", "rivedi")
NEXT_WORDS = ("next", "continue", "suivant", "continuer", "weiter", "siguiente", "continuar", "avanti")
SAVE_WORDS = ("save", "enregistrer", "speichern", "guardar", "salva")

_APPLICATION_WORDS = re.compile(r"(?<!\w)(?:applications?|candidature|bewerbung|solicitud|candidatura)(?!\w)")
_SENT_WORDS = re.compile(r"(?<!\w)(?:sent|submitted|envoyee|gesendet|enviada|inviata)(?!\w)")


def button_kind(label: str) -> ModalState | None:
    """Map a primary button label to the wizard state it represents."""
    text = normalize_text(label)
    if any(word in text for word in SUBMIT_WORDS):
        return ModalState.SUBMIT
    if any(word in text for word in REVIEW_WORDS):
        return ModalState.REVIEW
    if any(word in text for word in NEXT_WORDS):
        return ModalState.FORM
    return None


def is_success_text(text: str) -> bool:
    normalized = normalize_text(text)
    return bool(_APPLICATION_WORDS.search(normalized) and _SENT_WORDS.search(normalized))


class NavigationStateMachine:
    """
    Drives the wizard from page to page.

    The state is never stored: ``get_modal_state`` recomputes it from the
    markup each time. ``page_index`` only moves forward on a successful
    transition.
    """

    def __init__(self, *, utils: FormUtils, logger: LoggerPort) -> None:
        self._utils = utils
        self._page = utils.page
        self._selectors = utils.selectors
        self._logger = logger
        self.page_index = 0

    # -- state --------------------------------------------------------------

    async def is_modal_open(self) -> bool:
        return await self._modal() is not None

    async def get_modal_state(self) -> ModalState:
        modal = await self._modal()
        if modal is None:
            return ModalState.CLOSED
        if await modal.query(self._selectors.success_markers) is not None:
            return ModalState.SUCCESS

        button = await self.find_primary_button(modal)
        kind = await self._button_kind(button) if button is not None else None
        if kind is not None:
            return kind
        # Confirmation copy only counts once no next/review/submit control is left.
        if is_success_text(await modal.visible_text()):
            return ModalState.SUCCESS
        if await self._visible_error_banner(modal) is not None:
            return ModalState.ERROR
        return ModalState.UNKNOWN

    async def find_primary_button(self, modal: ElementPort | None = None) -> ElementPort | None:
        """Explicit hooks first, then aria-label text, then generic primary styling."""
        root = modal or await self._modal()
        if root is None:
            return None
        selectors = [
            *self._selectors.primary_hooks,
            *(f'button[aria-label*="{label}"]' for label in self._selectors.primary_aria_labels),
            self._selectors.primary_generic,
        ]
        for selector in selectors:
            for button in await root.query_all(selector):
                if await button.is_visible() and await button.is_enabled():
                    return button
        return None

    async def primary_is_submit(self) -> bool:
        button = await self.find_primary_button()
        return button is not None and await self._button_kind(button) is ModalState.SUBMIT

    # -- transitions --------------------------------------------------------

    async def advance(self) -> NavigationResult:
        """Click the primary button; raise ``NavigationError`` when the wizard cannot move."""
        result = await self.click_primary_button()
        if result.success:
            self.page_index += 1
            return result
        if result.state is ModalState.ERROR:
            return result
        raise NavigationError(result.error or "navigation failed", state=result.state.value)

    async def click_primary_button(self) -> NavigationResult:
        modal = await self._modal()
        if modal is None:
            return NavigationResult(success=True, state=ModalState.CLOSED)

        button = await self.find_primary_button(modal)
        if button is None:
            state = await self.get_modal_state()
            if state is ModalState.SUCCESS:
                return NavigationResult(success=True, state=state)
            self._logger.error("primary_button_missing", state=state.value, page_index=self.page_index)
            return NavigationResult(success=False, state=state, error="No primary button found")

        label = await self._label(button)
        submitting = await self._button_kind(button) is ModalState.SUBMIT
        if submitting:
            await self.uncheck_follow_company()

        before = normalize_text(await modal.visible_text())
        if not await self._utils.safe_click(button):
            return NavigationResult(
                success=False,
                state=await self.get_modal_state(),
                button_label=label,
                error=f"Could not click '{label}'",
            )
        self._logger.info("primary_button_clicked", label=label, page_index=self.page_index)
        await self._utils.pause(self._utils.delays.long_ms)

        if await self.has_validation_errors():
            errors = await self.get_validation_errors()
            message = "; ".join(e.message for e in errors) or "validation error"
            self._logger.warning("page_validation_errors", label=label, errors=message)
            return NavigationResult(
                success=False,
                state=ModalState.ERROR,
                button_label=label,
                error=message,
                validation_errors=tuple(errors),
            )

        if await self.handle_save_dialog():
            self._logger.info("save_dialog_handled", label=label)

        state = await self.get_modal_state()
        if state in (ModalState.CLOSED, ModalState.SUCCESS):
            return NavigationResult(success=True, state=ModalState.SUCCESS, button_label=label, submitted=submitting)
        if state is ModalState.ERROR:
            return NavigationResult(success=False, state=state, button_label=label, error="Error banner shown")

        if await self._unchanged(before):
            self._logger.error("primary_click_no_effect", label=label, state=state.value)
            return NavigationResult(
                success=False,
                state=state,
                button_label=label,
                error=f"Clicking '{label}' did not change the wizard",
            )
        return NavigationResult(success=True, state=state, button_label=label)

    # -- validation ---------------------------------------------------------

    async def has_validation_errors(self) -> bool:
        modal = await self._modal()
        return modal is not None and await self._visible_error_banner(modal) is not None

    async def get_validation_errors(self) -> list[ValidationError]:
        modal = await self._modal()
        if modal is None:
            return []
        errors: list[ValidationError] = []
        seen: set[str] = set()
        for selector in self._selectors.form_sections:
            for container in await modal.query_all(selector):
                message = await self._utils.extract_field_errors(container)
                if not message:
                    continue
                key = await self._utils.stable_key(container)
                if key in seen:
                    continue
                seen.add(key)
                group = FieldGroup(container=container, question=await extract_question_text(container), key=key)
                errors.append(ValidationError(message=message, field_group=group))
        if not errors:
            banner = await self._visible_error_banner(modal)
            if banner is not None:
                errors.append(ValidationError(message=dedupe_doubled_text(await banner.visible_text())))
        return errors

    # -- side effects -------------------------------------------------------

    async def handle_save_dialog(self) -> bool:
        """Answer a "save your progress?" interruption and wait for the wizard to come back."""
        dialog = await self._visible(self._selectors.save_dialog)
        if dialog is None:
            return False
        save = await dialog.query(self._selectors.save_dialog_save)
        if save is None:
            for button in await dialog.query_all("button"):
                if normalize_text(await button.visible_text()) in SAVE_WORDS:
                    save = button
                    break
        if save is None:
            return False

        await self._utils.safe_click(save)
        wait_ms = self._utils.delays.dialog_wait_ms
        await self._page.wait_for(self._selectors.save_dialog, state="hidden", timeout_ms=wait_ms)
        reopened = await self._page.wait_for(self._selectors.modal, state="visible", timeout_ms=wait_ms)
        if not reopened:
            self._logger.warning("wizard_not_reopened_after_save")
        return True

    async def uncheck_follow_company(self) -> bool:
        checkbox = await self._page.query(self._selectors.follow_company)
        if checkbox is None or not await checkbox.is_checked():
            return False
        checkbox_id = await checkbox.get_attribute("id")
        label = await self._page.query(f'label[for="{checkbox_id}"]') if checkbox_id else None
        if label is not None:
            await self._utils.safe_click(label)
        if await checkbox.is_checked():
            await checkbox.set_checked(False)
        self._logger.info("follow_company_unchecked")
        return True

    async def close_modal(self) -> bool:
        """Dismiss the wizard, confirming the discard prompt when it appears."""
        dismiss = await self._visible(self._selectors.dismiss_button)
        if dismiss is not None:
            await self._utils.safe_click(dismiss)
        else:
            await self._page.press_key("Escape")
        await self._utils.pause(self._utils.delays.medium_ms)

        discard = await self._visible(self._selectors.discard_button)
        if discard is not None:
            await self._utils.safe_click(discard)
            await self._utils.pause(self._utils.delays.medium_ms)
        closed = not await self.is_modal_open()
        self._logger.info("wizard_closed" if closed else "wizard_close_failed")
        return closed

    async def wait_for_modal_ready(self) -> None:
        await self._page.wait_for(
            self._selectors.spinner,
            state="hidden",
            timeout_ms=self._utils.delays.element_wait_ms,
        )
        await self._utils.pause(self._utils.delays.medium_ms)

    # -- internal helpers ---------------------------------------------------

    async def _modal(self) -> ElementPort | None:
        return await self._visible(self._selectors.modal)

    async def _visible(self, selector: str) -> ElementPort | None:
        return await self._utils.first_visible(await self._page.query_all(selector))

    async def _visible_error_banner(self, modal: ElementPort) -> ElementPort | None:
        for banner in await modal.query_all(self._selectors.error_banner):
            if await banner.is_visible() and (await banner.visible_text()).strip():
                return banner
        return None

    async def _label(self, button: ElementPort) -> str:
        text = dedupe_doubled_text(await button.visible_text())
        return text or (await button.get_attribute("aria-label") or "").strip()

    async def _button_kind(self, button: ElementPort) -> ModalState | None:
        if await button.get_attribute("data-live-test-easy-apply-submit-button") is not None:
            return ModalState.SUBMIT
        if await button.get_attribute("data-live-test-easy-apply-review-button") is not None:
            return ModalState.REVIEW
        label = " ".join(
            [await self._label(button), await button.get_attribute("aria-label") or ""]
        )
        kind = button_kind(label)
        if kind is None and (
            await button.get_attribute("data-live-test-easy-apply-next-button") is not None
            or await button.get_attribute("data-easy-apply-next-button") is not None
        ):
            return ModalState.FORM
        return kind

    async def _unchanged(self, before: str) -> bool:
        modal = await self._modal()
        if modal is None or normalize_text(await modal.visible_text()) != before:
            return False
        await self.wait_for_modal_ready()
        modal = await self._modal()
        return modal is not None and normalize_text(await modal.visible_text()) == before
