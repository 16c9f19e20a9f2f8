from __future__ import annotations  # Styled PDF rendering for practice session reports

from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import SessionReport

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_value(value: Optional[float]) -> str:  # Format score for display
    if value is None:
        return "N/A"
    return f"{value:.1f}/10"


class ReportPDF(FPDF):  # PDF with banner header and paginated footer
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.header_title = "Interview Practice Report"

    def _prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        return value.replace("•", "-").encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args: Any, **kwargs: Any):  # type: ignore[override]
        return super().cell(w, h, self._prepare_text(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args: Any, **kwargs: Any):  # type: ignore[override]
        return super().multi_cell(w, h, self._prepare_text(text), *args, **kwargs)

    def header(self) -> None:  # Render header banner
        if self.page_no() == 1:
            self.set_fill_color(*ACCENT)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font("Helvetica", "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(0, 8, self.header_title)
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_font("Helvetica", "B", 12)
            self.set_xy(self.l_margin, 8)
            self.cell(0, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_draw_color(*ACCENT)
            self.line(self.l_margin, self.get_y() + 1, self.w - self.r_margin, self.get_y() + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _rows(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Label/value pairs
    width = _effective_width(pdf)
    for label, value in rows:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(width * 0.35, 6, label)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 10)
        pdf.multi_cell(width * 0.65, 6, value, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_answers(pdf: ReportPDF, report: SessionReport) -> None:  # One block per question
    width = _effective_width(pdf)
    by_question = {item.question_id: item for item in report.responses}
    for number, question in enumerate(report.questions, start=1):
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*ACCENT)
        pdf.set_font("Helvetica", "B", 11)
        pdf.multi_cell(width, 6, f"Q{number} [{question.category}, {question.difficulty}]: {question.text}",
                       new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        response = by_question.get(question.id)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "", 10)
        if response is None:
            pdf.set_text_color(*MUTED)
            pdf.multi_cell(width, 5.5, "Not answered.", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(3)
            continue
        fb = response.feedback
        pdf.multi_cell(width, 5.5, f"A ({response.response_time_seconds}s): {response.transcript}",
                       new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "B", 10)
        pdf.multi_cell(
            width,
            5.5,
            f"Content {fb.content_score}/10 - Communication {fb.communication_score}/10 - Confidence {fb.confidence_score}/10",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(width, 5.5, fb.detailed_feedback, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        for label, items in (("Strength", fb.strengths), ("Improve", fb.improvements)):
            for item in items:
                pdf.multi_cell(width, 5.5, f"- {label}: {item}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(3)


def generate_session_report_pdf(report: SessionReport) -> bytes:  # Build PDF payload for a session report
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.header_title = f"{report.config.job_title} at {report.config.company} - Practice Report"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    summary = report.summary
    _section_title(pdf, "Session Overview")
    _rows(
        pdf,
        [
            ("Session ID", report.session_id),
            ("Generated", report.generated_at.strftime("%d %b %Y, %H:%M UTC")),
            ("Questions answered", f"{summary.answered_questions} of {summary.total_questions}"),
            ("Completion rate", f"{summary.completion_rate:.0f}%"),
            ("Total response time", f"{summary.total_response_time}s"),
        ],
    )

    _section_title(pdf, "Scores")
    _rows(
        pdf,
        [
            ("Overall", _score_value(summary.overall_score)),
            ("Content", _score_value(summary.averages.content)),
            ("Communication", _score_value(summary.averages.communication)),
            ("Confidence", _score_value(summary.averages.confidence)),
        ],
    )

    _section_title(pdf, "Questions & Feedback")
    _render_answers(pdf, report)

    return bytes(pdf.output())


__all__ = ["generate_session_report_pdf"]
