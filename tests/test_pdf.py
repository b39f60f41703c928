"""Tests for PDF report rendering.

Tests cover:
- Rendering from templates (valid PDF output)
- Turkish date filters
- Error handling (template not found, render failures)
- The shipped weekly participation template
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from tests.factories import create_user
from tutorhub.db.models.base import UserRole
from tutorhub.services.pdf import (
    PDFGenerationError,
    PDFResult,
    ReportPDFGenerator,
    TemplateNotFoundError,
)
from tutorhub.services.reports import (
    KIND_EVENT,
    ActivityRecord,
    build_weekly_participation,
    summarize_tutor,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def temp_template_dir(tmp_path: Path) -> Path:
    template_dir = tmp_path / "templates"
    template_dir.mkdir()
    (template_dir / "simple.html").write_text(
        "<html><body><h1>{{ title }}</h1><p>{{ app_name }}</p>"
        "<p>{{ when | format_datetime }}</p></body></html>",
        encoding="utf-8",
    )
    (template_dir / "broken.html").write_text("{{ missing.attribute.deep }}", encoding="utf-8")
    return template_dir


@pytest.fixture
def generator(temp_template_dir: Path) -> ReportPDFGenerator:
    return ReportPDFGenerator(template_dir=temp_template_dir, tz=ZoneInfo("Europe/Istanbul"))


class TestRender:
    def test_renders_pdf(self, generator: ReportPDFGenerator) -> None:
        result = generator.render(
            "simple.html",
            {"title": "Haftalık Rapor", "when": datetime(2024, 3, 4, 9, 0, tzinfo=UTC)},
            filename="rapor.pdf",
        )

        assert isinstance(result, PDFResult)
        assert result.content.startswith(b"%PDF")
        assert result.page_count == 1
        assert result.template_name == "simple.html"
        assert result.filename == "rapor.pdf"

    def test_template_not_found(self, generator: ReportPDFGenerator) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            generator.render("nope.html", {}, filename="x.pdf")
        assert exc_info.value.template_name == "nope.html"
        assert exc_info.value.status_code == 500

    def test_render_failure(self, generator: ReportPDFGenerator) -> None:
        with pytest.raises(PDFGenerationError) as exc_info:
            generator.render("broken.html", {}, filename="x.pdf")
        assert exc_info.value.message == "PDF oluşturulurken bir hata oluştu"
        assert exc_info.value.cause is not None

    def test_available_templates(self, generator: ReportPDFGenerator) -> None:
        assert generator.get_available_templates() == ["broken.html", "simple.html"]


class TestDateFilters:
    """Dates are shown in the configured timezone with Turkish month names."""

    def test_format_date(self, generator: ReportPDFGenerator) -> None:
        # 22:30 UTC is already the next day in Istanbul
        assert generator._format_date(datetime(2024, 10, 18, 22, 30, tzinfo=UTC)) == "19 Eki 2024"

    def test_format_datetime(self, generator: ReportPDFGenerator) -> None:
        value = datetime(2024, 3, 4, 9, 5, tzinfo=UTC)
        assert generator._format_datetime(value) == "4 Mar 2024 12:05"

    def test_missing_value(self, generator: ReportPDFGenerator) -> None:
        assert generator._format_date(None) == "-"
        assert generator._format_datetime(None) == "-"


class TestShippedTemplates:
    def test_templates_present(self) -> None:
        assert ReportPDFGenerator().get_available_templates() == [
            "sociometric.html",
            "weekly_participation.html",
        ]

    def test_weekly_participation_pdf(self) -> None:
        now = datetime(2024, 3, 6, tzinfo=UTC)
        tutor = create_user(username="ayse", first_name="Ayşe", last_name="Kaya", role=UserRole.TUTOR)
        activity = ActivityRecord(
            id=tutor.id, title="Satranç", type=KIND_EVENT, date=now, registered=8, attended=6
        )
        report = build_weekly_participation(
            [summarize_tutor(tutor, [activity], student_count=8)], now - timedelta(days=7), now
        )

        result = ReportPDFGenerator().generate_weekly_participation_pdf(report)

        assert result.content.startswith(b"%PDF")
        assert result.filename.startswith("haftalik-katilim-raporu-")
        assert result.filename.endswith(".pdf")
