from __future__ import annotations  # Session report package exports

from .export import build_report, report_filename, report_payload
from .models import SessionReport
from .pdf import generate_session_report_pdf

__all__ = ["SessionReport", "build_report", "generate_session_report_pdf", "report_filename", "report_payload"]
