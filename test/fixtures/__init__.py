"""Test fixtures: wizard markup builders and wired handler contexts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from domain.models import CandidateProfile, EducationEntry, PersonalInfo, WizardConfig
from domain.services import AnswerCache, FormUtils, HandlerContext, SmartFieldMatcher
from test.mocks import FakeElement, FakeWizardPage, InMemoryLogger, ScriptedAnswerGenerator, h

SECTION_CLASS = "jobs-easy-apply-form-section__grouping"
FAST_CONFIG = WizardConfig()


def candidate_profile() -> CandidateProfile:
    return CandidateProfile(
        personal=PersonalInfo(
            name="Jane",
            surname="Doe",
            email="jane.doe@example.com",
            phone="+33 6 12 34 56 78",
            phone_prefix="+33",
            phone_national="612345678",
            city="Lyon",
            country="France",
        ),
        education=(EducationEntry(institution="Université Jean Moulin Lyon 3", degree="MSc"),),
        links={"GitHub": "https://github.com/janedoe", "LinkedIn": "https://linkedin.com/in/janedoe"},
        summary="Backend engineer with eight years of Python.",
    )


# -- markup builders --------------------------------------------------------


def section(*children: FakeElement, **attrs: str) -> FakeElement:
    return h("div", {"class": SECTION_CLASS, **attrs}, *children)


def text_section(question: str, input_id: str, *, input_type: str = "text", **input_attrs: str) -> FakeElement:
    return section(
        h("label", {"for": input_id}, text=question),
        h("input", {"id": input_id, "type": input_type, **input_attrs}),
    )


def textarea_section(question: str, area_id: str, value: str = "") -> FakeElement:
    return section(
        h("label", {"for": area_id}, text=question),
        h("textarea", {"id": area_id}, value=value),
    )


def radio_section(question: str, name: str, labels: Sequence[str]) -> FakeElement:
    children: list[FakeElement] = [h("legend", text=question)]
    for index, label in enumerate(labels):
        radio_id = f"{name}-{index}"
        children.append(h("input", {"id": radio_id, "type": "radio", "name": name, "value": label}))
        children.append(h("label", {"for": radio_id}, text=label))
    return section(h("fieldset", {}, *children))


def checkbox_section(question: str, name: str, labels: Sequence[str]) -> FakeElement:
    children: list[FakeElement] = [h("legend", text=question)]
    for index, label in enumerate(labels):
        box_id = f"{name}-{index}"
        children.append(h("input", {"id": box_id, "type": "checkbox", "name": name}))
        children.append(h("label", {"for": box_id}, text=label))
    return section(h("fieldset", {}, *children))


def select_section(
    question: str,
    select_id: str,
    options: Sequence[str | tuple[str, str]],
    *,
    placeholder: str | None = "Select an option",
) -> FakeElement:
    option_nodes: list[FakeElement] = []
    if placeholder is not None:
        option_nodes.append(h("option", {"value": ""}, text=placeholder))
    for option in options:
        label, value = option if isinstance(option, tuple) else (option, option)
        option_nodes.append(h("option", {"value": value}, text=label))
    return section(
        h("label", {"for": select_id}, text=question),
        h("select", {"id": select_id}, *option_nodes),
    )


def upload_section(label: str, input_id: str, *children: FakeElement) -> FakeElement:
    return h(
        "div",
        {"class": "jobs-document-upload"},
        h("label", {"for": input_id}, text=label),
        h("input", {"id": input_id, "type": "file"}),
        *children,
    )


def error_text(message: str) -> FakeElement:
    return h("div", {"class": "artdeco-inline-feedback--error"}, text=message)


def primary_button(label: str, **state: object) -> FakeElement:
    return h("button", {"class": "artdeco-button--primary", "aria-label": label}, text=label, **state)


def modal(*children: FakeElement) -> FakeElement:
    return h("div", {"class": "jobs-easy-apply-modal", "role": "dialog", "aria-modal": "true"}, *children)


# -- wiring -----------------------------------------------------------------


@dataclass
class HandlerHarness:
    page: FakeWizardPage
    ctx: HandlerContext
    cache: AnswerCache
    answers: ScriptedAnswerGenerator
    logger: InMemoryLogger


def handler_harness(
    *children: FakeElement,
    answers: ScriptedAnswerGenerator | None = None,
    cache: AnswerCache | None = None,
    profile: CandidateProfile | None = None,
    config: WizardConfig | None = None,
) -> HandlerHarness:
    page = FakeWizardPage(*children)
    logger = InMemoryLogger()
    answers = answers or ScriptedAnswerGenerator()
    cache = cache if cache is not None else AnswerCache(logger=logger)
    utils = FormUtils(page=page, logger=logger, config=config or FAST_CONFIG)
    ctx = HandlerContext(
        utils=utils,
        cache=cache,
        answers=answers,
        matcher=SmartFieldMatcher(profile or candidate_profile(), logger),
        logger=logger,
    )
    return HandlerHarness(page=page, ctx=ctx, cache=cache, answers=answers, logger=logger)


# -- scripted wizard --------------------------------------------------------


@dataclass
class WizardStep:
    sections: Sequence[FakeElement]
    button: str = "Continue to next step"
    validate: Callable[[], str | None] | None = None


class ScriptedWizard:
    """
    A modal whose primary button walks through ``steps``.

    A step's ``validate`` returning a message shows an error banner instead
    of advancing. After the last step the modal closes, or shows a
    confirmation when ``confirm_on_submit`` is set.
    """

    def __init__(self, *steps: WizardStep, confirm_on_submit: bool = False) -> None:
        self.steps = list(steps)
        self.index = 0
        self.clicks = 0
        self.submitted = False
        self.modal = modal()
        self._confirm_on_submit = confirm_on_submit
        self._render()

    def _render(self) -> None:
        step = self.steps[self.index]
        self.modal.replace_children(
            [
                h("h3", text=f"Step {self.index + 1} of {len(self.steps)}"),
                *step.sections,
                primary_button(step.button, on_click=self._click),
            ]
        )

    def _click(self, _: FakeElement) -> None:
        self.clicks += 1
        step = self.steps[self.index]
        message = step.validate() if step.validate is not None else None
        for banner in self.modal.select_all(".artdeco-inline-feedback--error"):
            if banner.parent_element is self.modal:
                banner.remove()
        if message:
            self.modal.append(error_text(message))
            return
        if self.index + 1 < len(self.steps):
            self.index += 1
            self._render()
            return
        self.submitted = True
        if self._confirm_on_submit:
            self.modal.replace_children([h("h2", text="Your application was sent")])
        else:
            self.modal.remove()
