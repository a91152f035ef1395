from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import build_parser, main
from domain.models import AnswerRecord
from infra.persistence import SQLiteAnswerRepository
from test.mocks import FakeWizardPage, h


def _config_dir(base: Path, *, key: str = "sk-abc12345678") -> Path:
    (base / "config.json").write_text(
        json.dumps({"OPENAI_KEY": key, "OPENAI_BASE_URL": "https://api.example.com/v1"})
    )
    (base / "profile.json").write_text(
        json.dumps({"name": "Jane", "surname": "Doe", "email": "jane@test.com"})
    )
    resume = base / "resume"
    resume.mkdir()
    (resume / "resume.pdf").write_bytes(b"%PDF-1.4 fake")
    return base


def _seed(db: Path) -> None:
    with SQLiteAnswerRepository(str(db)) as repo:
        repo.save(AnswerRecord(field_type="text", question="city", value="Lyon"))
        repo.save(AnswerRecord(field_type="radio", question="work mode", value="Remote"))


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["apply-url", "https://jobs.example.com/1"])
    assert args.headless is True
    assert args.dry_run is False
    assert args.config_dir == "./config"
    assert args.db_path == "wizard_answers.db"


def test_parser_rejects_missing_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_list_answers_prints_each_record(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = tmp_path / "answers.db"
    _seed(db)

    assert main(["--db-path", str(db), "list-answers"]) == 0

    assert capsys.readouterr().out.splitlines() == [
        "radio | work mode | Remote",
        "text | city | Lyon",
    ]


def test_forget_answer_normalizes_question(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = tmp_path / "answers.db"
    _seed(db)

    assert main(["--db-path", str(db), "forget-answer", "TEXT", "  City "]) == 0
    assert main(["--db-path", str(db), "forget-answer", "text", "city"]) == 1

    assert capsys.readouterr().out.splitlines() == ["removed", "not found"]


def test_validate_config_without_connectivity(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_dir = _config_dir(tmp_path)

    assert main(["validate-config", "--config-dir", str(config_dir), "--skip-connectivity"]) == 0

    out = capsys.readouterr().out
    assert "Config OK: model=gpt-4o-mini" in out
    assert "Profile: Jane Doe (jane@test.com)" in out
    assert "Cover letter: generated on demand" in out
    assert "Skipping connectivity checks" in out


def test_validate_config_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_dir = _config_dir(tmp_path, key="YOUR_KEY_HERE")

    assert main(["validate-config", "--config-dir", str(config_dir), "--skip-connectivity"]) == 1

    out = capsys.readouterr().out
    assert out.startswith("Config validation failed:")
    assert "OPENAI_KEY is a placeholder" in out


def test_apply_url_stops_on_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["apply-url", "https://jobs.example.com/1", "--config-dir", str(tmp_path)]) == 1
    assert "Config validation failed:" in capsys.readouterr().out


class _PostingOnlyBrowser:
    """Browser stand-in serving a job page that shows an "Applied" badge."""

    instances: list["_PostingOnlyBrowser"] = []

    def __init__(self, **kwargs: object) -> None:
        self.entered = False
        self.closed = False
        _PostingOnlyBrowser.instances.append(self)

    async def launch(self) -> None:
        return None

    async def open_posting(self, url: str) -> FakeWizardPage:
        return FakeWizardPage(
            h("h1", {"class": "jobs-unified-top-card__job-title"}, text="Backend Engineer"),
            h("span", {"class": "jobs-details-top-card__apply-status--applied"}, text="Applied"),
        )

    async def enter_wizard(self, page: FakeWizardPage) -> FakeWizardPage:
        self.entered = True
        return page

    async def close(self) -> None:
        self.closed = True


def test_apply_url_skips_a_posting_already_applied_to(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    config_dir = _config_dir(tmp_path)
    monkeypatch.setattr(_PostingOnlyBrowser, "instances", [])
    monkeypatch.setattr("cli.main.PlaywrightBrowserSession", _PostingOnlyBrowser)

    code = main(
        ["--db-path", str(tmp_path / "answers.db"), "apply-url", "https://jobs.example.com/9", "--config-dir", str(config_dir)]
    )

    assert code == 0
    (browser,) = _PostingOnlyBrowser.instances
    assert not browser.entered
    assert browser.closed
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "result=already_applied pages=0 llm_calls=0 reason=-"
    assert any('"already_applied"' in line for line in out)
