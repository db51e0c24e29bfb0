"""Plain-text rendering of diagnostic reports."""

import os
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models.diagnostics import DiagnosticFinding, DiagnosticReport


class DiagnosticReportRenderer:
    """
    Renders diagnostic reports as plain text for CLI and log output.

    Uses Jinja2 templates; findings are indented by the depth of their
    field path and prefixed with their severity glyph.
    """

    TEMPLATE_NAME = "diagnostic_report.txt.j2"

    def __init__(self, template_dir: Optional[str] = None):
        """
        Initialize the renderer.

        Args:
            template_dir: Directory containing Jinja2 templates.
                         If not provided, uses the bundled templates.
        """
        if template_dir is None:
            template_dir = os.path.join(os.path.dirname(__file__), "templates")

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(['html', 'xml']),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, report: DiagnosticReport, source: Optional[str] = None) -> str:
        """
        Render a report as text.

        Args:
            report: The diagnostic report.
            source: Optional document label shown in the header.

        Returns:
            The rendered report.
        """
        template = self.env.get_template(self.TEMPLATE_NAME)
        return template.render(
            kind=report.kind.value,
            source=source,
            findings=self._prepare_findings(report.findings),
            summary=report.to_dict()["summary"],
            remediation=report.remediation,
        )

    def _prepare_findings(self, findings: List[DiagnosticFinding]) -> List[Dict]:
        """Prepare findings for template rendering."""
        return [
            {
                "indent": "  " * sum(1 for part in f.path if not part.startswith("[")),
                "glyph": f.glyph,
                "path": f.dotted_path,
                "message": f.message,
            }
            for f in findings
        ]


def render_report(report: DiagnosticReport, source: Optional[str] = None) -> str:
    """Render a report with the bundled template."""
    return DiagnosticReportRenderer().render(report, source=source)
