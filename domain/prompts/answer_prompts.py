"""Prompt builders for the answer-generation capability."""

from __future__ import annotations

import json
from typing import Sequence

from domain.models import CandidateProfile
from domain.prompts.system_prompt import SYSTEM_PROMPT


def profile_block(profile: CandidateProfile) -> str:
    personal = profile.personal
    data = {
        "name": personal.full_name,
        "email": personal.email,
        "phone": personal.phone,
        "city": personal.city,
        "country": personal.country,
        "education": [
            {
                "institution": e.institution,
                "degree": e.degree,
                "field_of_study": e.field_of_study,
                "graduation_year": e.graduation_year,
            }
            for e in profile.education
        ],
        "links": dict(profile.links),
        "summary": profile.summary,
    }
    return json.dumps({k: v for k, v in data.items() if v}, indent=2, ensure_ascii=False)


def _frame(profile: CandidateProfile, job_context: str | None, body: str) -> str:
    job = f"\nJob description:\n{job_context.strip()}\n" if job_context else ""
    return (
        f"{SYSTEM_PROMPT}\n"
        f"Candidate profile:\n{profile_block(profile)}\n"
        f"{job}\n"
        f"{body}"
    )


def build_textual_prompt(profile: CandidateProfile, question: str, *, job_context: str | None = None) -> str:
    return _frame(profile, job_context, f"Question: {question}\nAnswer:")


def build_numeric_prompt(profile: CandidateProfile, question: str, *, job_context: str | None = None) -> str:
    return _frame(
        profile,
        job_context,
        f"Question: {question}\nReply with a single whole number only.\nAnswer:",
    )


def build_options_prompt(
    profile: CandidateProfile,
    question: str,
    options: Sequence[str],
    *,
    job_context: str | None = None,
) -> str:
    listed = "\n".join(f"- {opt}" for opt in options)
    return _frame(
        profile,
        job_context,
        f"Question: {question}\nOptions:\n{listed}\n"
        "Reply with the exact text of the best option.\nAnswer:",
    )


def build_checkbox_prompt(profile: CandidateProfile, prompt: str, *, job_context: str | None = None) -> str:
    return _frame(profile, job_context, f"{prompt}\nAnswer:")


def build_retry_prompt(
    profile: CandidateProfile,
    question: str,
    previous_answer: str,
    error_message: str,
    *,
    options: Sequence[str] | None = None,
    numeric: bool = False,
    job_context: str | None = None,
) -> str:
    lines = [
        f"Question: {question}",
        f'Your previous answer "{previous_answer}" was rejected by the form with this error:',
        f'"{error_message}"',
        "Give a corrected answer that satisfies the error message.",
    ]
    if options:
        lines.append("Options:")
        lines.extend(f"- {opt}" for opt in options)
        lines.append("Reply with the exact text of one option, different from the previous answer if possible.")
    elif numeric:
        lines.append("Reply with a single whole number only.")
    lines.append("Answer:")
    return _frame(profile, job_context, "\n".join(lines))
