"""
Domain services.

These services fill and advance an application wizard while depending only
on domain models and ports, so that browser and network adapters stay thin.
"""

from .answer_cache import AnswerCache
from .cover_letter import CoverLetterArtifactGenerator, cover_letter_html
from .debug import DebugRunManager
from .dispatcher import FieldDispatcher
from .document_type import DocumentTypeDetector
from .form_utils import FormUtils
from .handlers import (
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
    parse_date_answer,
)
from .navigation import NavigationStateMachine
from .posting import JobPostingInspector
from .smart_matcher import SmartFieldMatcher
from .status import StatusReporter
from .wizard import WizardSession

__all__ = [
    "AnswerCache",
    "FormUtils",
    "SmartFieldMatcher",
    "DocumentTypeDetector",
    "CoverLetterArtifactGenerator",
    "cover_letter_html",
    "FieldHandler",
    "HandlerContext",
    "TextHandler",
    "TextareaHandler",
    "RadioHandler",
    "CheckboxHandler",
    "DropdownHandler",
    "TypeaheadHandler",
    "DateHandler",
    "FileUploadHandler",
    "parse_date_answer",
    "FieldDispatcher",
    "NavigationStateMachine",
    "JobPostingInspector",
    "StatusReporter",
    "DebugRunManager",
    "WizardSession",
]
