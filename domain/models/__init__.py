from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Sequence

if TYPE_CHECKING:
    from domain.ports import ElementPort


@dataclass(frozen=True)
class PersonalInfo:
    """Personal contact fields of the candidate.

    ``phone`` is the full number as the candidate writes it. Some wizards
    split the country code from the national number, so both halves may
    also be given separately.
    """

    name: str
    email: str
    surname: str | None = None
    phone: str | None = None
    phone_prefix: str | None = None
    phone_national: str | None = None
    city: str | None = None
    country: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.name, self.surname) if part)


@dataclass(frozen=True)
class EducationEntry:
    institution: str
    degree: str | None = None
    field_of_study: str | None = None
    graduation_year: str | None = None


@dataclass(frozen=True)
class CandidateProfile:
    """Read-only structured candidate data consumed by the wizard core."""

    personal: PersonalInfo
    education: Sequence[EducationEntry] = field(default_factory=tuple)
    links: Mapping[str, str] = field(default_factory=dict)
    summary: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "education", tuple(self.education))
        object.__setattr__(
            self,
            "links",
            MappingProxyType({k.lower(): v for k, v in self.links.items()}),
        )

    def link(self, platform: str) -> str | None:
        return self.links.get(platform.lower())


@dataclass(frozen=True)
class AnswerRecord:
    """One remembered answer. ``question`` is already normalized."""

    field_type: str
    question: str
    value: str

    @property
    def key(self) -> str:
        return f"{self.field_type}:{self.question}"


class FieldType(str, Enum):
    """Cache namespaces, one per handler variant."""

    TEXT = "text"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    TYPEAHEAD = "typeahead"
    DATE = "date"
    FILE_UPLOAD = "file_upload"


@dataclass(frozen=True)
class FieldGroup:
    """A DOM region holding one question and its controls.

    Only valid while the current wizard page is displayed.
    """

    container: "ElementPort"
    question: str
    key: str


class ModalState(str, Enum):
    """What the wizard shows right now, derived from page markup."""

    CLOSED = "closed"
    FORM = "form"
    REVIEW = "review"
    SUBMIT = "submit"
    SUCCESS = "success"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (ModalState.SUCCESS, ModalState.CLOSED)


@dataclass(frozen=True)
class ValidationError:
    """Validation message shown by the site next to a field group.

    This is a value object, not an exception.
    """

    message: str
    field_group: FieldGroup | None = None


class DocumentType(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover_letter"
    OTHER = "other"


@dataclass(frozen=True)
class DocumentTypeResult:
    document_type: DocumentType
    detected_by: str
    matched_token: str | None = None


@dataclass(frozen=True)
class DateParts:
    year: int
    month: int | None = None
    day: int | None = None


@dataclass(frozen=True)
class PageFillResult:
    """Outcome of filling every field group found on one wizard page."""

    fields_processed: int = 0
    fields_failed: int = 0
    skipped_questions: Sequence[str] = field(default_factory=tuple)
    errors: Sequence[str] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        if self.fields_processed == 0:
            return True
        return self.fields_failed < self.fields_processed / 2


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of one primary-button click."""

    success: bool
    state: ModalState
    button_label: str | None = None
    submitted: bool = False
    error: str | None = None
    validation_errors: Sequence[ValidationError] = field(default_factory=tuple)


class WizardOutcome(str, Enum):
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    DRY_RUN = "dry_run"
    STOPPED = "stopped"
    FAILED = "failed"
    ALREADY_APPLIED = "already_applied"


@dataclass(frozen=True)
class WizardResult:
    outcome: WizardOutcome
    final_state: ModalState
    pages_completed: int = 0
    primary_clicks: int = 0
    fields_processed: int = 0
    fields_failed: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome in (
            WizardOutcome.SUBMITTED,
            WizardOutcome.COMPLETED,
            WizardOutcome.DRY_RUN,
            WizardOutcome.ALREADY_APPLIED,
        )


@dataclass(frozen=True)
class JobPosting:
    """What the job page shows before the wizard is opened."""

    title: str | None = None
    company: str | None = None
    description: str | None = None
    already_applied: bool = False

    def context(self, description_limit: int = 500) -> str | None:
        """Short summary handed to the answer generator, or None when nothing was read."""
        lines = []
        if self.title:
            lines.append(f"Job Title: {self.title}")
        if self.company:
            lines.append(f"Company: {self.company}")
        if self.description:
            lines.append(f"Description: {self.description[:description_limit]}")
        return "\n".join(lines) or None


@dataclass
class WizardStats:
    """Mutable counters owned by one session."""

    pages_completed: int = 0
    primary_clicks: int = 0
    fields_filled: int = 0
    fields_failed: int = 0
    fields_skipped: int = 0

    def snapshot(self) -> dict[str, int]:
        return {
            "pages_completed": self.pages_completed,
            "primary_clicks": self.primary_clicks,
            "fields_filled": self.fields_filled,
            "fields_failed": self.fields_failed,
            "fields_skipped": self.fields_skipped,
        }


@dataclass(frozen=True)
class StatusUpdate:
    """One message on the session-to-observer status channel."""

    stage: str
    activity: str
    message: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)
    stats: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DelayPolicy:
    """Waits, in milliseconds, between UI interactions."""

    short_ms: int = 150
    medium_ms: int = 500
    long_ms: int = 1000
    upload_ms: int = 2000
    typing_ms: int = 50
    element_wait_ms: int = 5000
    listbox_wait_ms: int = 3000
    dialog_wait_ms: int = 5000


@dataclass(frozen=True)
class WizardConfig:
    delays: DelayPolicy = field(default_factory=DelayPolicy)
    max_pages: int = 15
    max_page_retries: int = 1
    max_validation_retries: int = 1
    max_fill_passes: int = 3
    textarea_filled_threshold: int = 50
    overwrite_prefilled_text: bool = True
    max_options_for_generation: int = 100
    safe_click_retries: int = 3
    pending_resume_timeout_ms: int = 120_000
    dry_run: bool = False


@dataclass(frozen=True)
class WizardSelectors:
    """Markup hooks used to find the wizard and its controls."""

    modal: str = '[data-test-modal], .jobs-easy-apply-modal, [role="dialog"][aria-modal="true"]'
    form_sections: Sequence[str] = (
        ".jobs-easy-apply-form-section__grouping",
        ".fb-dash-form-element",
        "[data-test-form-element]",
        ".jobs-document-upload",
        ".jobs-resume-picker",
        "fieldset",
    )
    field_errors: Sequence[str] = (
        "[data-test-form-element-error-message]",
        ".artdeco-inline-feedback--error",
        ".fb-form-element__error-text",
        '[role="alert"]',
    )
    error_banner: str = ".artdeco-inline-feedback--error, [data-test-form-element-error-message]"
    spinner: str = ".artdeco-spinner, [aria-busy=\"true\"]"
    primary_hooks: Sequence[str] = (
        "button[data-live-test-easy-apply-submit-button]",
        "button[data-live-test-easy-apply-review-button]",
        "button[data-live-test-easy-apply-next-button]",
        "button[data-easy-apply-next-button]",
    )
    primary_aria_labels: Sequence[str] = (
        "Submit application",
        "Review your application",
        "Continue to next step",
        "Envoyer la candidature",
        "Vérifier votre candidature",
        "Passer à l'étape suivante",
        "Bewerbung senden",
        "Bewerbung überprüfen",
        "Weiter zum nächsten Schritt",
        "Enviar solicitud",
        "Revisar tu solicitud",
        "Continuar al siguiente paso",
    )
    primary_generic: str = "button.artdeco-button--primary, button[type=\"submit\"]"
    save_dialog: str = '[role="alertdialog"], [data-test-modal-id="data-test-easy-apply-discard-confirmation"]'
    save_dialog_save: str = "button[data-test-dialog-primary-btn]"
    discard_button: str = "button[data-test-dialog-secondary-btn], button[data-control-name=\"discard_application_confirm_btn\"]"
    dismiss_button: str = 'button[aria-label="Dismiss"], button[data-test-modal-close-btn]'
    follow_company: str = "#follow-company-checkbox"
    success_markers: str = "[data-test-application-submitted], .artdeco-inline-feedback--success"
    uploaded_markers: Sequence[str] = (
        ".jobs-document-upload__filename",
        "[data-test-document-upload-success]",
        ".jobs-document-upload-redesign-card__file-name",
    )
    upload_cards: str = (
        "[data-test-document-upload-file-card], "
        ".jobs-document-upload-redesign-card__container, "
        ".jobs-resume-picker__resume"
    )
    upload_hooks: str = "[data-test-document-upload], .jobs-document-upload, .jobs-resume-picker"
    # job posting page, read before the wizard is opened
    job_title: str = ".job-details-jobs-unified-top-card__job-title, .jobs-unified-top-card__job-title"
    job_company: str = ".job-details-jobs-unified-top-card__company-name, .jobs-unified-top-card__company-name"
    job_description: Sequence[str] = (
        'span[data-testid="expandable-text-box"]',
        "#job-details",
        "article.jobs-description__container .jobs-box__html-content",
        "div.jobs-description-content__text--stretch",
    )
    description_expand: str = "button.inline-show-more-text__button, button.jobs-description__footer-button"
    applied_badge: str = ".jobs-details-top-card__apply-status--applied"
    applied_status: str = (
        ".jobs-s-apply span, "
        ".job-details-jobs-unified-top-card__container--two-pane span, "
        ".artdeco-inline-feedback--success"
    )


@dataclass(frozen=True)
class RunContext:
    """Per-run context for wizard sessions and debug snapshots."""

    run_id: str
    is_debug: bool = False
    log_directory: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    openai_key: str
    openai_base_url: str
    openai_model: str = "gpt-4o-mini"
    debug_mode: bool = False
    wizard: WizardConfig = field(default_factory=WizardConfig)


__all__ = [
    "PersonalInfo",
    "EducationEntry",
    "CandidateProfile",
    "AnswerRecord",
    "FieldType",
    "FieldGroup",
    "ModalState",
    "ValidationError",
    "DocumentType",
    "DocumentTypeResult",
    "DateParts",
    "PageFillResult",
    "NavigationResult",
    "WizardOutcome",
    "WizardResult",
    "JobPosting",
    "WizardStats",
    "StatusUpdate",
    "DelayPolicy",
    "WizardConfig",
    "WizardSelectors",
    "RunContext",
    "AppConfig",
]
