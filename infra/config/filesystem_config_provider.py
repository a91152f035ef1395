from __future__ import annotations

import asyncio
import dataclasses
import json
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.errors import ConfigError
from domain.models import (
    AppConfig,
    CandidateProfile,
    DelayPolicy,
    EducationEntry,
    PersonalInfo,
    WizardConfig,
)


@dataclass(frozen=True)
class ConnectivityResult:
    """Outcome of validate_connectivity(): empty errors means the endpoint answered."""

    errors: list[str]

    @property
    def ok(self) -> bool:
        return not self.errors


CONFIG_FILE = "config.json"
PROFILE_FILE = "profile.json"
RESUME_FILE = Path("resume") / "resume.pdf"
COVER_LETTER_FILE = Path("cover_letter") / "cover_letter.pdf"

_REQUIRED_KEYS = {
    CONFIG_FILE: frozenset({"OPENAI_KEY", "OPENAI_BASE_URL"}),
    PROFILE_FILE: frozenset({"name", "email"}),
}
_PROFILE_PLACEHOLDERS = {"name": "Your Full Name", "email": "your@email.com"}
_LOCAL_HTTP_PREFIXES = ("http://localhost", "http://127.0.0.1")
_PROBE_TIMEOUT_S = 15

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{7,}$")
_PHONE_PREFIX_PATTERN = re.compile(r"^\+?\d{1,4}$")


def _field_defaults(cls: type) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for item in dataclasses.fields(cls):
        if item.default is not dataclasses.MISSING:
            defaults[item.name] = item.default
        elif item.default_factory is not dataclasses.MISSING:
            defaults[item.name] = item.default_factory()
    return defaults


def _check_overrides(
    section: str,
    overrides: Any,
    defaults: dict[str, Any],
    errors: list[str],
) -> None:
    if not isinstance(overrides, dict):
        errors.append(f"{section} must be an object.")
        return
    for key, value in overrides.items():
        if key not in defaults:
            errors.append(f"{section}.{key} is not a known setting.")
            continue
        default = defaults[key]
        if isinstance(default, DelayPolicy):
            _check_overrides(f"{section}.{key}", value, _field_defaults(DelayPolicy), errors)
        elif isinstance(default, bool):
            if not isinstance(value, bool):
                errors.append(f"{section}.{key} must be a boolean (true/false).")
        elif isinstance(default, int):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                errors.append(f"{section}.{key} must be a non-negative integer.")


def wizard_config_from_dict(data: dict[str, Any] | None) -> WizardConfig:
    """Build a WizardConfig from the ``wizard`` object of config.json.

    Raises ``ConfigError`` for unknown keys or mistyped values.
    """
    data = dict(data or {})
    errors: list[str] = []
    _check_overrides("wizard", data, _field_defaults(WizardConfig), errors)
    if errors:
        raise ConfigError(errors)
    delays = data.pop("delays", None)
    if delays is not None:
        data["delays"] = DelayPolicy(**delays)
    return WizardConfig(**data)


# -- config.json / profile.json checks --------------------------------------


def check_app_config(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    key = str(data.get("OPENAI_KEY", ""))
    if "YOUR" in key.upper():
        errors.append("OPENAI_KEY is a placeholder. Set your real OpenAI API key.")
    elif len(key) < 10:
        errors.append("OPENAI_KEY must be at least 10 characters.")

    base_url = str(data.get("OPENAI_BASE_URL", ""))
    if not base_url.startswith("https://") and not base_url.startswith(_LOCAL_HTTP_PREFIXES):
        errors.append("OPENAI_BASE_URL must start with 'https://' (plain http only for localhost).")

    model = data.get("OPENAI_MODEL")
    if model is not None and not (isinstance(model, str) and model.strip()):
        errors.append("OPENAI_MODEL must be a non-empty string.")

    if not isinstance(data.get("debug_mode", False), bool):
        errors.append("debug_mode must be a boolean (true/false), not a string.")

    if "wizard" in data:
        _check_overrides("wizard", data["wizard"], _field_defaults(WizardConfig), errors)
    return errors


def check_profile(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    prefix = f"{PROFILE_FILE}:"

    if not data.get("name") or data["name"] == _PROFILE_PLACEHOLDERS["name"]:
        errors.append(f"{prefix} name is a placeholder. Enter your real name.")

    email = str(data.get("email", ""))
    if not _EMAIL_PATTERN.match(email):
        errors.append(f"{prefix} email '{email}' is not a valid email address.")
    elif email == _PROFILE_PLACEHOLDERS["email"]:
        errors.append(f"{prefix} email is a placeholder. Enter your real email.")

    for field_name, pattern, hint in (
        ("phone", _PHONE_PATTERN, "is not a valid phone number"),
        ("phone_prefix", _PHONE_PREFIX_PATTERN, "must look like '+33'"),
    ):
        value = data.get(field_name)
        if value is not None and not pattern.match(str(value)):
            errors.append(f"{prefix} {field_name} '{value}' {hint}.")

    education = data.get("education", [])
    if not isinstance(education, list):
        errors.append(f"{prefix} education must be a list.")
    else:
        errors.extend(
            f"{prefix} education[{index}] needs an institution."
            for index, entry in enumerate(education)
            if not isinstance(entry, dict) or not entry.get("institution")
        )

    if not isinstance(data.get("links", {}), dict):
        errors.append(f"{prefix} links must map platform names to URLs.")
    return errors


class FileSystemConfigProvider:
    """
    ConfigProviderPort over a folder laid out as::

        config.json
        profile.json
        resume/resume.pdf
        cover_letter/cover_letter.pdf   (optional)

    Nothing is cached: each call reads the files again, so edits apply to
    the next wizard run.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def validate(self) -> list[str]:
        errors: list[str] = []
        for filename, check in ((CONFIG_FILE, check_app_config), (PROFILE_FILE, check_profile)):
            data = self._load_for_validation(filename, errors)
            if data is not None:
                errors.extend(check(data))

        resume = Path(self.get_resume_path())
        if not resume.is_file():
            errors.append(f"Resume not found at {resume}. Place your resume.pdf in the resume/ folder.")
        return errors

    async def validate_connectivity(self) -> ConnectivityResult:
        """Verify the OpenAI-compatible endpoint accepts the configured key."""
        config = self.get_config()
        problem = await asyncio.to_thread(_check_models_endpoint, config.openai_key, config.openai_base_url)
        return ConnectivityResult(errors=[problem] if problem else [])

    def get_config(self) -> AppConfig:
        data = self._load(CONFIG_FILE)
        return AppConfig(
            openai_key=data["OPENAI_KEY"],
            openai_base_url=data["OPENAI_BASE_URL"],
            openai_model=data.get("OPENAI_MODEL") or "gpt-4o-mini",
            debug_mode=bool(data.get("debug_mode", False)),
            wizard=wizard_config_from_dict(data.get("wizard")),
        )

    def get_profile(self) -> CandidateProfile:
        data = self._load(PROFILE_FILE)
        education = tuple(
            EducationEntry(
                institution=entry["institution"],
                degree=entry.get("degree"),
                field_of_study=entry.get("field_of_study"),
                graduation_year=_optional_str(entry.get("graduation_year")),
            )
            for entry in data.get("education", [])
        )
        return CandidateProfile(
            personal=PersonalInfo(
                name=data["name"],
                email=data["email"],
                surname=data.get("surname"),
                phone=_optional_str(data.get("phone")),
                phone_prefix=_optional_str(data.get("phone_prefix")),
                phone_national=_optional_str(data.get("phone_national")),
                city=data.get("city"),
                country=data.get("country"),
            ),
            education=education,
            links=data.get("links", {}),
            summary=data.get("summary"),
        )

    def get_resume_path(self) -> str:
        return str(self._config_dir / RESUME_FILE)

    def get_cover_letter_path(self) -> str | None:
        path = self._config_dir / COVER_LETTER_FILE
        return str(path) if path.is_file() else None

    # -- internal helpers ---------------------------------------------------

    def _load(self, filename: str) -> dict[str, Any]:
        """Parse ``filename``; any problem becomes a ``ConfigError``."""
        errors: list[str] = []
        data = self._load_for_validation(filename, errors)
        if data is None:
            raise ConfigError(errors)
        return data

    def _load_for_validation(self, filename: str, errors: list[str]) -> dict[str, Any] | None:
        path = self._config_dir / filename
        if not path.is_file():
            errors.append(f"Missing file: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
        if not isinstance(data, dict):
            errors.append(f"{filename} must contain a JSON object.")
            return None
        missing = _REQUIRED_KEYS[filename] - data.keys()
        if missing:
            errors.append(f"{filename} missing keys: {', '.join(sorted(missing))}")
            return None
        return data


def _check_models_endpoint(api_key: str, base_url: str) -> str | None:
    """GET ``<base_url>/models``; returns a readable problem or None."""
    request = urllib.request.Request(f"{base_url.rstrip('/')}/models", method="GET")
    request.add_header("Authorization", f"Bearer {api_key}")
    try:
        with urllib.request.urlopen(request, timeout=_PROBE_TIMEOUT_S) as response:
            response.read()
    except urllib.error.HTTPError as exc:
        if exc.code == 401:
            return "OpenAI API key rejected: 401 Unauthorized. Check OPENAI_KEY in config.json."
        return f"OpenAI API error: {exc.code} {exc.reason}."
    except (urllib.error.URLError, OSError, ValueError) as exc:
        return f"OpenAI connectivity failed: {exc}"
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)
