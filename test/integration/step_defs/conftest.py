"""Shared fixtures, context and steps for wizard BDD scenarios."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from pytest_bdd import given, parsers, then, when

from domain.models import RunContext, WizardConfig, WizardResult
from domain.services import AnswerCache, DebugRunManager, WizardSession
from test.fixtures import ScriptedWizard, WizardStep, candidate_profile, text_section
from test.mocks import (
    FakeWizardPage,
    FixedClock,
    InMemoryDebugArtifactStore,
    InMemoryLogger,
    ScriptedAnswerGenerator,
    SequentialIdGenerator,
    h,
)


@dataclass
class WizardContext:
    """Holds mutable state shared across BDD steps."""

    steps: list[WizardStep] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)
    config: WizardConfig = field(default_factory=WizardConfig)
    debug_mode: bool = False
    debug_store: InMemoryDebugArtifactStore = field(default_factory=InMemoryDebugArtifactStore)
    wizard: ScriptedWizard | None = None
    answers: ScriptedAnswerGenerator | None = None
    result: WizardResult | None = None


@pytest.fixture()
def ctx() -> WizardContext:
    return WizardContext()


def run_wizard(ctx: WizardContext) -> None:
    """Run a WizardSession over the scripted wizard synchronously."""
    wizard = ScriptedWizard(*ctx.steps)
    page = FakeWizardPage(wizard.modal)
    page.on_key = lambda key: wizard.modal.remove() if key == "Escape" else None
    answers = ScriptedAnswerGenerator(options=ctx.options)
    logger = InMemoryLogger()
    ids = SequentialIdGenerator()

    debug_manager: DebugRunManager | None = None
    if ctx.debug_mode:
        debug_manager = DebugRunManager(ctx.debug_store)

    session = WizardSession.create(
        page=page,
        profile=candidate_profile(),
        answers=answers,
        cache=AnswerCache(logger=logger),
        clock=FixedClock(datetime(2025, 6, 1, tzinfo=timezone.utc)),
        logger=logger,
        resume_path="/fake/resume.pdf",
        cover_letter_path="/fake/cover_letter.pdf",
        config=ctx.config,
        debug_manager=debug_manager,
        run_context=RunContext(run_id=ids.new_run_id(), is_debug=ctx.debug_mode),
    )

    ctx.wizard = wizard
    ctx.answers = answers
    ctx.result = asyncio.run(session.run())


# -- Given steps ------------------------------------------------------------


@given(parsers.parse('a wizard page asking "{question}" as text'))
def given_text_page(ctx: WizardContext, question: str) -> None:
    ctx.steps.append(WizardStep([text_section(question, f"q{len(ctx.steps)}")]))


@given("a final review page")
def given_review_page(ctx: WizardContext) -> None:
    ctx.steps.append(WizardStep([h("p", text="Please review your answers")], button="Submit application"))


@given("debug mode is enabled")
def given_debug_on(ctx: WizardContext) -> None:
    ctx.debug_mode = True


@given("debug mode is disabled")
def given_debug_off(ctx: WizardContext) -> None:
    ctx.debug_mode = False


# -- When steps -------------------------------------------------------------


@when("the wizard session runs")
def when_session_runs(ctx: WizardContext) -> None:
    run_wizard(ctx)


# -- Then steps -------------------------------------------------------------


@then(parsers.parse('the outcome should be "{outcome}"'))
def then_outcome(ctx: WizardContext, outcome: str) -> None:
    assert ctx.result is not None
    assert ctx.result.outcome.value == outcome
