from __future__ import annotations

import html
import shutil
import tempfile
from pathlib import Path

from domain.ports import AnswerGeneratorPort, ClockPort, LoggerPort, WizardPagePort

COVER_LETTER_REQUEST = "Write a cover letter for this job application"
MIN_COVER_LETTER_LENGTH = 100

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
body {{ font-family: Georgia, 'Times New Roman', serif; font-size: 11pt; line-height: 1.5; color: #222; }}
p {{ margin: 0 0 12pt 0; }}
</style>
</head>
<body>
{paragraphs}
</body>
</html>
"""


def cover_letter_html(text: str) -> str:
    """Blank lines separate paragraphs; single newlines become line breaks."""
    paragraphs = []
    for block in text.strip().split("\n\n"):
        block = block.strip()
        if not block:
            continue
        lines = [html.escape(line.strip()) for line in block.split("\n")]
        paragraphs.append(f"<p>{'<br>'.join(lines)}</p>")
    return _PAGE_TEMPLATE.format(paragraphs="\n".join(paragraphs))


class CoverLetterArtifactGenerator:
    """
    Writes a cover letter PDF on demand when none was supplied.

    Without an ``output_dir`` each instance gets its own temporary
    directory, created on first use and removed by ``cleanup()``.
    """

    def __init__(
        self,
        *,
        answers: AnswerGeneratorPort,
        page: WizardPagePort,
        clock: ClockPort,
        logger: LoggerPort,
        output_dir: str | None = None,
    ) -> None:
        self._answers = answers
        self._page = page
        self._clock = clock
        self._logger = logger
        self._output_dir = output_dir
        self._owned_dir: str | None = None
        self._generated: list[Path] = []

    @property
    def last_path(self) -> str | None:
        return str(self._generated[-1]) if self._generated else None

    async def generate(self) -> str | None:
        text = (await self._answers.answer_textual(COVER_LETTER_REQUEST)).strip()
        if len(text) < MIN_COVER_LETTER_LENGTH:
            self._logger.warning("cover_letter_too_short", length=len(text))
            return None

        stamp = int(self._clock.now().timestamp() * 1000)
        path = self._directory() / f"cover_letter_{stamp}.pdf"
        await self._page.render_pdf(cover_letter_html(text), str(path))
        self._generated.append(path)
        self._logger.info("cover_letter_generated", path=str(path), length=len(text))
        return str(path)

    def cleanup(self) -> None:
        """Delete every generated file and the private temporary directory."""
        for path in self._generated:
            path.unlink(missing_ok=True)
        self._generated.clear()
        if self._owned_dir is not None:
            shutil.rmtree(self._owned_dir, ignore_errors=True)
            self._owned_dir = None

    def _directory(self) -> Path:
        if self._output_dir is not None:
            directory = Path(self._output_dir)
            directory.mkdir(parents=True, exist_ok=True)
            return directory
        if self._owned_dir is None:
            self._owned_dir = tempfile.mkdtemp(prefix="cover_letter_")
        return Path(self._owned_dir)
