import asyncio
from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from domain import (
    AnswerRecord,
    AnswerRepositoryPort,
    CandidateProfile,
    ClockPort,
    ConfigError,
    ConfigProviderPort,
    ElementPort,
    EducationEntry,
    LoggerPort,
    ModalState,
    NavigationError,
    PersonalInfo,
    RunContext,
    WizardConfig,
    WizardError,
    WizardPagePort,
)
from domain.models import (
    NavigationResult,
    PageFillResult,
    WizardOutcome,
    WizardResult,
    WizardStats,
)
from infra.config import FileSystemConfigProvider
from test.mocks import FakeElement, FakeWizardPage, InMemoryAnswerRepository, InMemoryConfigProvider


def test_personal_info_full_name_joins_name_and_surname() -> None:
    assert PersonalInfo(name="Ada", surname="Lovelace", email="a@b.c").full_name == "Ada Lovelace"
    assert PersonalInfo(name="Ada", email="a@b.c").full_name == "Ada"


def test_candidate_profile_is_read_only() -> None:
    profile = CandidateProfile(
        personal=PersonalInfo(name="Ada", email="ada@example.com"),
        education=[EducationEntry(institution="Cambridge")],
        links={"GitHub": "https://github.com/ada"},
    )
    assert isinstance(profile.education, tuple)
    assert profile.link("github") == "https://github.com/ada"
    assert profile.link("GITHUB") == "https://github.com/ada"
    with pytest.raises(TypeError):
        profile.links["gitlab"] = "x"  # type: ignore[index]
    with pytest.raises(FrozenInstanceError):
        profile.summary = "changed"  # type: ignore[misc]


def test_answer_record_key() -> None:
    assert AnswerRecord(field_type="radio", question="work mode", value="Remote").key == "radio:work mode"


def test_modal_state_terminal_states() -> None:
    assert ModalState.SUCCESS.is_terminal
    assert ModalState.CLOSED.is_terminal
    assert not ModalState.ERROR.is_terminal
    assert not ModalState.FORM.is_terminal


def test_page_fill_result_success_threshold() -> None:
    assert PageFillResult().success
    assert PageFillResult(fields_processed=4, fields_failed=1).success
    assert not PageFillResult(fields_processed=4, fields_failed=2).success


def test_navigation_result_defaults() -> None:
    result = NavigationResult(success=True, state=ModalState.FORM)
    assert result.submitted is False
    assert result.validation_errors == ()


def test_wizard_result_success_outcomes() -> None:
    for outcome in (WizardOutcome.SUBMITTED, WizardOutcome.COMPLETED, WizardOutcome.DRY_RUN):
        assert WizardResult(outcome=outcome, final_state=ModalState.SUCCESS).success
    for outcome in (WizardOutcome.FAILED, WizardOutcome.STOPPED):
        assert not WizardResult(outcome=outcome, final_state=ModalState.ERROR).success


def test_wizard_stats_snapshot_is_a_copy() -> None:
    stats = WizardStats(primary_clicks=2)
    snap = stats.snapshot()
    stats.primary_clicks = 5
    assert snap["primary_clicks"] == 2


def test_wizard_config_defaults() -> None:
    cfg = WizardConfig()
    assert cfg.max_pages == 15
    assert cfg.max_validation_retries == 1
    assert cfg.textarea_filled_threshold == 50
    assert cfg.delays.typing_ms == 50
    assert cfg.dry_run is False


def test_run_context_defaults() -> None:
    ctx = RunContext(run_id="run-123")
    assert ctx.run_id == "run-123"
    assert ctx.is_debug is False
    assert ctx.log_directory is None


def test_errors_share_a_base_class() -> None:
    nav = NavigationError("stuck", state="form")
    cfg = ConfigError(["a", "b"])
    assert isinstance(nav, WizardError) and nav.state == "form"
    assert isinstance(cfg, WizardError) and cfg.errors == ["a", "b"]
    assert str(cfg) == "a; b"


def test_fake_dom_satisfies_element_and_page_ports() -> None:
    assert isinstance(FakeElement("div"), ElementPort)
    assert isinstance(FakeWizardPage(), WizardPagePort)


def test_answer_repository_port_protocol() -> None:
    repo: AnswerRepositoryPort = InMemoryAnswerRepository()
    repo.save(AnswerRecord(field_type="text", question="city", value="Lyon"))
    assert [r.value for r in repo.list_all()] == ["Lyon"]
    assert repo.delete("text", "city") is True
    assert repo.delete("text", "city") is False


def test_clock_port_protocol() -> None:
    class FixedClock:
        def __init__(self, fixed: datetime) -> None:
            self._fixed = fixed

        def now(self) -> datetime:
            return self._fixed

    fixed = datetime(2024, 1, 1)
    clock: ClockPort = FixedClock(fixed)
    assert clock.now() == fixed


def test_logger_port_protocol(capsys: pytest.CaptureFixture[str]) -> None:
    class PrintLogger:
        def debug(self, message: str, **fields: object) -> None:
            print("DEBUG", message, fields)

        def info(self, message: str, **fields: object) -> None:
            print("INFO", message, fields)

        def warning(self, message: str, **fields: object) -> None:
            print("WARNING", message, fields)

        def error(self, message: str, **fields: object) -> None:
            print("ERROR", message, fields)

    logger: LoggerPort = PrintLogger()
    logger.info("hello", run_id="123")
    out = capsys.readouterr().out
    assert "INFO" in out and "hello" in out


def test_fake_dom_label_click_toggles_its_checkbox() -> None:
    async def main() -> None:
        box = FakeElement("input", {"id": "agree", "type": "checkbox"})
        label = FakeElement("label", {"for": "agree"}, text="I agree")
        FakeWizardPage(box, label)
        await label.click()
        assert await box.is_checked()

    asyncio.run(main())


def test_config_provider_port_protocol(tmp_path) -> None:
    assert isinstance(FileSystemConfigProvider(str(tmp_path)), ConfigProviderPort)
    provider: ConfigProviderPort = InMemoryConfigProvider(validation_errors=["profile.json missing"])
    assert isinstance(provider, ConfigProviderPort)
    assert provider.validate() == ["profile.json missing"]
    assert provider.get_profile().personal.full_name == "Test User"
    assert provider.get_cover_letter_path() is None
