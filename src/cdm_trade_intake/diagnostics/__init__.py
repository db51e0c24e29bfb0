"""Diagnostic reporting for CDM trade documents."""

from .remediation import DEFAULT_REMEDIATION, REMEDIATION_BY_KIND, remediation_for
from .report_builder import DiagnosticReportBuilder, build_report
from .renderer import DiagnosticReportRenderer, render_report

__all__ = [
    "DEFAULT_REMEDIATION",
    "REMEDIATION_BY_KIND",
    "remediation_for",
    "DiagnosticReportBuilder",
    "build_report",
    "DiagnosticReportRenderer",
    "render_report",
]
