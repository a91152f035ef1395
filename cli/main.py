from __future__ import annotations

import argparse
import asyncio
import dataclasses
import signal
from typing import Sequence

from domain.errors import ConfigError, WizardError
from domain.models import RunContext, WizardOutcome
from domain.services import AnswerCache, DebugRunManager, JobPostingInspector, WizardSession
from domain.utils import normalize_text
from infra.browser import PlaywrightBrowserSession
from infra.config import FileSystemConfigProvider
from infra.interaction import ConsoleStatusObserver
from infra.llm import LLMAnswerGenerator, OpenAIChatClient
from infra.logs import FileSystemDebugArtifactStore
from infra.persistence import SQLiteAnswerRepository
from infra.runtime import StructuredLogger, SystemClock, TimestampRunIdGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wizard-autofill")
    parser.add_argument("--db-path", default="wizard_answers.db")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_p = sub.add_parser("apply-url", help="Open a job posting and fill its application wizard")
    apply_p.add_argument("job_url")
    apply_p.add_argument("--config-dir", default="./config", help="Path to config folder")
    apply_p.add_argument("--debug", action="store_true", help="Save an HTML snapshot after each page")
    apply_p.add_argument("--debug-artifacts-dir", default="logs")
    apply_p.add_argument("--dry-run", action="store_true", help="Fill every page but never submit")
    apply_p.add_argument("--verbose", action="store_true", help="Emit debug log lines")
    apply_p.add_argument("--storage-state", default=None, help="Playwright storage state of a logged-in browser")
    apply_p.add_argument("--headless", action="store_true", default=True)
    apply_p.add_argument("--no-headless", dest="headless", action="store_false")

    sub.add_parser("list-answers", help="Print remembered answers")

    forget_p = sub.add_parser("forget-answer", help="Delete one remembered answer")
    forget_p.add_argument("field_type")
    forget_p.add_argument("question")

    validate_p = sub.add_parser("validate-config", help="Check config files and API connectivity")
    validate_p.add_argument("--config-dir", default="./config")
    validate_p.add_argument(
        "--skip-connectivity",
        action="store_true",
        help="Skip the OpenAI connectivity check",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "validate-config":
        return _handle_validate(args)

    if args.command == "list-answers":
        with SQLiteAnswerRepository(args.db_path) as repo:
            for record in repo.list_all():
                print(f"{record.field_type} | {record.question} | {record.value}")
        return 0

    if args.command == "forget-answer":
        with SQLiteAnswerRepository(args.db_path) as repo:
            removed = repo.delete(args.field_type.lower(), normalize_text(args.question))
        print("removed" if removed else "not found")
        return 0 if removed else 1

    if args.command == "apply-url":
        return _handle_apply(args)

    raise SystemExit(f"Unsupported command: {args.command}")


def _print_errors(title: str, errors: Sequence[str]) -> None:
    print(title)
    for err in errors:
        print(f"  - {err}")


def _handle_validate(args: argparse.Namespace) -> int:
    config_provider = FileSystemConfigProvider(args.config_dir)
    errors = config_provider.validate()
    if errors:
        _print_errors("Config validation failed:", errors)
        return 1

    cfg = config_provider.get_config()
    profile = config_provider.get_profile()
    print(f"Config OK: model={cfg.openai_model}, base_url={cfg.openai_base_url}")
    print(f"Profile: {profile.personal.full_name} ({profile.personal.email})")
    print(f"Cover letter: {config_provider.get_cover_letter_path() or 'generated on demand'}")
    print(f"Debug mode: {'ON' if cfg.debug_mode else 'OFF'}")

    if args.skip_connectivity:
        print("Skipping connectivity checks (--skip-connectivity)")
        return 0

    print("Verifying API connectivity...")
    conn_result = asyncio.run(config_provider.validate_connectivity())
    if not conn_result.ok:
        _print_errors("Connectivity check failed:", conn_result.errors)
        return 1
    print("OpenAI API: connected")
    return 0


def _handle_apply(args: argparse.Namespace) -> int:
    config_provider = FileSystemConfigProvider(args.config_dir)
    errors = config_provider.validate()
    if errors:
        _print_errors("Config validation failed:", errors)
        return 1

    try:
        cfg = config_provider.get_config()
        profile = config_provider.get_profile()
    except ConfigError as exc:
        _print_errors("Config validation failed:", exc.errors)
        return 1

    logger = StructuredLogger(verbose=args.verbose)
    clock = SystemClock()
    ids = TimestampRunIdGenerator(clock)
    wizard_config = dataclasses.replace(cfg.wizard, dry_run=args.dry_run or cfg.wizard.dry_run)
    run_context = RunContext(run_id=ids.new_run_id(), is_debug=args.debug or cfg.debug_mode)
    debug_manager = None
    if run_context.is_debug:
        debug_manager = DebugRunManager(FileSystemDebugArtifactStore(base_dir=args.debug_artifacts_dir))

    async def _run() -> int:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, stop_event.set)
        except NotImplementedError:
            pass

        browser = PlaywrightBrowserSession(headless=args.headless, storage_state=args.storage_state)
        repo = SQLiteAnswerRepository(args.db_path, clock=clock)
        try:
            await browser.launch()
            page = await browser.open_posting(args.job_url)
            posting = await JobPostingInspector(page=page, logger=logger).inspect()
            if posting.already_applied:
                logger.info("already_applied", url=args.job_url, title=posting.title)
                print(f"result={WizardOutcome.ALREADY_APPLIED.value} pages=0 llm_calls=0 reason=-")
                return 0
            page = await browser.enter_wizard(page)
            llm = OpenAIChatClient(
                api_key=cfg.openai_key,
                base_url=cfg.openai_base_url,
                model=cfg.openai_model,
            )
            answers = LLMAnswerGenerator(llm=llm, profile=profile, logger=logger, job_context=posting.context())
            session = WizardSession.create(
                page=page,
                profile=profile,
                answers=answers,
                cache=AnswerCache.from_repository(repo, logger=logger),
                clock=clock,
                logger=logger,
                resume_path=config_provider.get_resume_path(),
                cover_letter_path=config_provider.get_cover_letter_path(),
                config=wizard_config,
                observer=ConsoleStatusObserver(),
                debug_manager=debug_manager,
                run_context=run_context,
            )
            result = await session.run(stop_event)
        except WizardError as exc:
            logger.error("apply_failed", url=args.job_url, error=str(exc))
            print(f"result=failed reason={exc}")
            return 1
        finally:
            repo.close()
            await browser.close()

        print(
            f"result={result.outcome.value} pages={result.pages_completed} "
            f"llm_calls={answers.call_count} reason={result.error or '-'}"
        )
        return 0 if result.success else 1

    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
