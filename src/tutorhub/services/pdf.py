"""PDF report rendering using WeasyPrint.

Reports are rendered from Jinja2 HTML templates under ``templates/pdf`` and
laid out on A4 pages by the shared stylesheet.

Example:
    from tutorhub.services.pdf import ReportPDFGenerator

    generator = ReportPDFGenerator()
    result = generator.generate_weekly_participation_pdf(report)
    response = Response(result.content, media_type="application/pdf")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from weasyprint import CSS, HTML

from tutorhub.core.errors import TutorHubError
from tutorhub.services.sociometric import TURKISH_MONTHS

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from tutorhub.services.reports import WeeklyParticipationReport
    from tutorhub.services.sociometric import SociometricAnalysis

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "pdf"
DEFAULT_CSS_PATH = DEFAULT_TEMPLATE_DIR / "styles.css"

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class PDFResult:
    """A rendered PDF.

    Attributes:
        content: The PDF bytes.
        page_count: Number of pages.
        template_name: Template that produced it.
        filename: Suggested download filename.
        generated_at: Generation time (ISO 8601).
    """

    content: bytes
    page_count: int
    template_name: str
    filename: str
    generated_at: str


class PDFGenerationError(TutorHubError):
    """Raised when a report cannot be rendered to PDF."""

    code = "pdf_generation_failed"
    status_code = 500
    default_message = "PDF oluşturulurken bir hata oluştu"

    def __init__(
        self,
        message: str | None = None,
        *,
        template_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.template_name = template_name
        self.cause = cause
        super().__init__(message)


class TemplateNotFoundError(PDFGenerationError):
    """Raised when a requested template does not exist."""


class ReportPDFGenerator:
    """Renders report dataclasses to A4 PDF documents.

    Create one instance and reuse it; the Jinja2 environment and stylesheet
    are loaded once.
    """

    def __init__(
        self,
        template_dir: Path | str | None = None,
        css_path: Path | str | None = None,
        *,
        tz: ZoneInfo | None = None,
        app_name: str = "TutorHub",
    ) -> None:
        self._template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self._css_path = Path(css_path) if css_path else DEFAULT_CSS_PATH
        self._base_url = f"file://{self._template_dir}/"
        self._tz = tz
        self._app_name = app_name

        self._env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self._env.filters["format_date"] = self._format_date
        self._env.filters["format_datetime"] = self._format_datetime

        self._css: CSS | None = None
        if self._css_path.exists():
            self._css = CSS(filename=str(self._css_path))

    def _localize(self, value: datetime) -> datetime:
        return value.astimezone(self._tz) if self._tz is not None else value

    def _format_date(self, value: datetime | None) -> str:
        """``"19 Eki 2026"``."""
        if value is None:
            return "-"
        dt = self._localize(value)
        return f"{dt.day} {TURKISH_MONTHS[dt.month - 1]} {dt.year}"

    def _format_datetime(self, value: datetime | None) -> str:
        """``"19 Eki 2026 14:05"``."""
        if value is None:
            return "-"
        dt = self._localize(value)
        return f"{self._format_date(dt)} {dt.hour:02d}:{dt.minute:02d}"

    def render(
        self,
        template_name: str,
        context: dict[str, Any],
        *,
        filename: str,
    ) -> PDFResult:
        """Render ``template_name`` with ``context`` to PDF.

        Raises:
            TemplateNotFoundError: If the template does not exist.
            PDFGenerationError: If rendering fails.
        """
        now = datetime.now(UTC)
        full_context = {"app_name": self._app_name, "generated_at": now, **context}

        try:
            html_content = self._env.get_template(template_name).render(**full_context)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(
                f"Template not found: {template_name}", template_name=template_name
            ) from e
        except Exception as e:
            logger.exception("Failed to render PDF template", extra={"template": template_name})
            raise PDFGenerationError(template_name=template_name, cause=e) from e

        try:
            document = HTML(string=html_content, base_url=self._base_url).render(
                stylesheets=[self._css] if self._css else None
            )
            pdf_bytes = document.write_pdf()
        except Exception as e:
            logger.exception("Failed to generate PDF", extra={"template": template_name})
            raise PDFGenerationError(template_name=template_name, cause=e) from e

        logger.debug(
            "Generated PDF from template=%s, pages=%d, bytes=%d",
            template_name,
            len(document.pages),
            len(pdf_bytes),
        )
        return PDFResult(
            content=pdf_bytes,
            page_count=len(document.pages),
            template_name=template_name,
            filename=filename,
            generated_at=now.isoformat(),
        )

    def generate_weekly_participation_pdf(self, report: WeeklyParticipationReport) -> PDFResult:
        day = self._localize(datetime.now(UTC))
        return self.render(
            "weekly_participation.html",
            {"report": report},
            filename=f"haftalik-katilim-raporu-{day:%d-%m-%Y}.pdf",
        )

    def generate_sociometric_pdf(self, analysis: SociometricAnalysis) -> PDFResult:
        day = self._localize(datetime.now(UTC))
        return self.render(
            "sociometric.html",
            {"analysis": analysis},
            filename=f"sosyometrik-analiz-{day:%d-%m-%Y}.pdf",
        )

    def get_available_templates(self) -> list[str]:
        if not self._template_dir.exists():
            return []
        return sorted(
            f.name for f in self._template_dir.iterdir() if f.is_file() and f.suffix == ".html"
        )

