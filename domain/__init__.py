"""
Domain layer package.

This package contains the wizard-filling logic, its models and the ports
it talks through. Nothing here depends on a browser or network library.
"""

from .errors import ConfigError, NavigationError, WizardError  # noqa: F401
from .models import (  # noqa: F401
    AnswerRecord,
    CandidateProfile,
    EducationEntry,
    FieldGroup,
    ModalState,
    PersonalInfo,
    RunContext,
    ValidationError,
    WizardConfig,
    WizardResult,
)
from .ports import (  # noqa: F401
    AnswerGeneratorPort,
    AnswerRepositoryPort,
    ClockPort,
    ConfigProviderPort,
    ElementPort,
    IdGeneratorPort,
    LLMClientPort,
    LoggerPort,
    StatusObserverPort,
    WizardPagePort,
)

__all__ = [
    # Errors
    "WizardError",
    "NavigationError",
    "ConfigError",
    # Models
    "PersonalInfo",
    "EducationEntry",
    "CandidateProfile",
    "AnswerRecord",
    "FieldGroup",
    "ModalState",
    "ValidationError",
    "WizardConfig",
    "WizardResult",
    "RunContext",
    # Ports
    "ElementPort",
    "WizardPagePort",
    "AnswerGeneratorPort",
    "AnswerRepositoryPort",
    "StatusObserverPort",
    "LLMClientPort",
    "ClockPort",
    "ConfigProviderPort",
    "IdGeneratorPort",
    "LoggerPort",
]
