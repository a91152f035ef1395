"""Answers for common field semantics taken straight from the candidate profile."""

from __future__ import annotations

import re
from typing import Sequence

from domain.models import CandidateProfile
from domain.ports import ElementPort, LoggerPort
from domain.utils import normalize_text

_URL_KEYWORDS = ("website", "url", "portfolio", "personal site", "site web", "github", "linkedin")
_PHONE_KEYWORDS = ("phone", "mobile", "telephone", "telefon", "telefono", "cellulaire")
_PREFIX_KEYWORDS = ("prefix", "country code", "indicatif", "vorwahl", "prefijo", "code pays")
_CITY_KEYWORDS = ("city", "location", "ville", "stadt", "ciudad", "localisation", "wohnort")
_EMAIL_KEYWORDS = ("email", "e-mail", "courriel")

COMMON_PHONE_PREFIXES = ("+1", "+44", "+33", "+49", "+39", "+34")

# Each tuple lists names that refer to the same institution.
SCHOOL_ALIASES: tuple[tuple[str, ...], ...] = (
    ("universite psl", "psl", "paris sciences et lettres", "psl research university"),
    ("institut polytechnique de paris", "ip paris", "polytechnique"),
    ("telecom sudparis", "telecom sud paris", "tsp"),
    ("telecom paris", "telecom paristech", "enst"),
    ("ecole polytechnique", "polytechnique", "l x"),
    ("hec paris", "hec", "ecole des hautes etudes commerciales"),
    ("sciences po", "sciencespo", "institut d'etudes politiques de paris"),
    ("ens", "ecole normale superieure", "ens ulm", "ens paris"),
    ("centrale", "centralesupelec", "ecole centrale"),
    ("mines", "mines paris", "mines paristech", "ecole des mines"),
    ("sainte-genevieve", "ginette", "lycee sainte-genevieve"),
)

_SCHOOL_STOPWORDS = frozenset(
    {"university", "universite", "institut", "institute", "ecole", "paris", "france", "college"}
)


class SmartFieldMatcher:
    """
    Heuristic resolver over a ``CandidateProfile``.

    ``match_by_element_id`` reads structural hints from id/name attributes;
    ``match_by_question_text`` is the keyword fallback. ``match_school`` and
    ``match_phone_prefix`` pick among enumerated dropdown options.
    """

    def __init__(self, profile: CandidateProfile, logger: LoggerPort | None = None) -> None:
        self._profile = profile
        self._logger = logger

    @property
    def profile(self) -> CandidateProfile:
        return self._profile

    async def match_by_element_id(self, element: ElementPort) -> str | None:
        element_id = (await element.get_attribute("id") or "").lower()
        name = (await element.get_attribute("name") or "").lower()
        personal = self._profile.personal

        if "geo-location" in element_id or "location-geo" in element_id or "location" in name:
            return self._hit("element_id", personal.city)
        if "phonenumber-nationalnumber" in element_id or "phone-national" in element_id:
            return self._hit("element_id", personal.phone_national or personal.phone)
        if "phone" in name or "phonenumber" in element_id:
            return self._hit("element_id", personal.phone)
        if "email" in element_id or "email" in name:
            return self._hit("element_id", personal.email)
        return None

    def match_by_question_text(self, question: str) -> str | None:
        q = normalize_text(question)
        if not q:
            return None
        personal = self._profile.personal

        if _has_any(q, _URL_KEYWORDS):
            return self._hit("question", self._match_url(q))
        if _has_any(q, _PHONE_KEYWORDS) and not _has_any(q, _PREFIX_KEYWORDS):
            if personal.phone_prefix and personal.phone_national:
                return self._hit("question", f"{personal.phone_prefix} {personal.phone_national}")
            return self._hit("question", personal.phone)
        if _has_any(q, _CITY_KEYWORDS):
            return self._hit("question", personal.city)
        if _has_any(q, _EMAIL_KEYWORDS):
            return self._hit("question", personal.email)
        return None

    def match_school(self, options: Sequence[str]) -> str | None:
        normalized = [(opt, normalize_text(opt)) for opt in options]
        for entry in self._profile.education:
            school = normalize_text(entry.institution)
            if not school:
                continue

            for opt, norm in normalized:
                if norm == school:
                    return opt

            for aliases in SCHOOL_ALIASES:
                if not any(_contains_word(school, alias) for alias in aliases):
                    continue
                for opt, norm in normalized:
                    if any(_contains_word(norm, alias) for alias in aliases):
                        return opt

            for opt, norm in normalized:
                if norm and (school in norm or norm in school):
                    return opt

            words = [
                w for w in re.split(r"[\s,\-]+", school)
                if len(w) > 4 and w not in _SCHOOL_STOPWORDS
            ]
            best, best_hits = None, 0
            for opt, norm in normalized:
                hits = sum(1 for w in words if w in norm)
                if hits > best_hits:
                    best, best_hits = opt, hits
            if best is not None:
                return best
        return None

    def match_phone_prefix(self, options: Sequence[str]) -> str | None:
        prefix = self._phone_prefix()
        if not prefix:
            return None
        digits = prefix.lstrip("+")
        pattern = re.compile(r"(?<!\d)\+?" + re.escape(digits) + r"(?!\d)")
        for opt in options:
            if pattern.search(opt):
                return opt
        return None

    # -- internal helpers ---------------------------------------------------

    def _phone_prefix(self) -> str | None:
        personal = self._profile.personal
        if personal.phone_prefix:
            prefix = personal.phone_prefix.strip()
            return prefix if prefix.startswith("+") else f"+{prefix}"
        phone = (personal.phone or "").replace(" ", "")
        # Longest first so "+1" never shadows a longer code
        for candidate in sorted(COMMON_PHONE_PREFIXES, key=len, reverse=True):
            if phone.startswith(candidate):
                return candidate
        return None

    def _match_url(self, q: str) -> str | None:
        if "github" in q:
            return self._profile.link("github")
        if "linkedin" in q:
            return self._profile.link("linkedin")
        for platform in ("portfolio", "website"):
            link = self._profile.link(platform)
            if link:
                return link
        return self._profile.link("github") or self._profile.link("linkedin")

    def _hit(self, source: str, value: str | None) -> str | None:
        if value and self._logger is not None:
            self._logger.debug("smart_match", source=source)
        return value or None


def _contains_word(text: str, phrase: str) -> bool:
    return re.search(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)", text) is not None


def _has_any(text: str, keywords: Sequence[str]) -> bool:
    return any(_contains_word(text, k) for k in keywords)
