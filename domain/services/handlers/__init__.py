"""The eight field-handling strategies and their shared base."""

from .base import FieldHandler, HandlerContext, extract_question_text
from .checkbox import CheckboxHandler
from .date import DateHandler, parse_date_answer
from .dropdown import DropdownHandler
from .file_upload import FileUploadHandler
from .radio import RadioHandler
from .text import TextHandler
from .textarea import TextareaHandler
from .typeahead import TypeaheadHandler

__all__ = [
    "FieldHandler",
    "HandlerContext",
    "extract_question_text",
    "TextHandler",
    "TextareaHandler",
    "RadioHandler",
    "CheckboxHandler",
    "DropdownHandler",
    "TypeaheadHandler",
    "DateHandler",
    "FileUploadHandler",
    "parse_date_answer",
]
