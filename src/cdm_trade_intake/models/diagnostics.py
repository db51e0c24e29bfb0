"""Diagnostic report models for the CDM Trade Intake System."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .document import format_path
from .enums import DocumentKind, Severity


SEVERITY_GLYPHS = {
    Severity.OK: "✓",
    Severity.WARNING: "⚠",
    Severity.CRITICAL: "✗",
}


@dataclass(frozen=True)
class DiagnosticFinding:
    """
    Single result of a diagnostic check.

    The path is the ordered sequence of field names the check looked
    at; an empty path refers to the document root.
    """
    path: Tuple[str, ...]
    severity: Severity
    message: str

    @property
    def glyph(self) -> str:
        return SEVERITY_GLYPHS[self.severity]

    @property
    def dotted_path(self) -> str:
        return format_path(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": list(self.path),
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass
class DiagnosticReport:
    """
    Ordered findings of one validation run plus remediation advice.

    Remediation text is selected by the document kind the report was
    generated for.
    """
    kind: DocumentKind
    findings: List[DiagnosticFinding] = field(default_factory=list)
    remediation: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.findings is None:
            self.findings = []
        if self.remediation is None:
            self.remediation = []

    def add(self, path: Tuple[str, ...], severity: Severity, message: str) -> DiagnosticFinding:
        """Append a finding and return it."""
        finding = DiagnosticFinding(path=tuple(path), severity=severity, message=message)
        self.findings.append(finding)
        return finding

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity is severity)

    @property
    def critical_findings(self) -> List[DiagnosticFinding]:
        return [f for f in self.findings if f.severity is Severity.CRITICAL]

    @property
    def warnings(self) -> List[DiagnosticFinding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    @property
    def has_critical(self) -> bool:
        return any(f.severity is Severity.CRITICAL for f in self.findings)

    def findings_at(self, *path: str) -> List[DiagnosticFinding]:
        """Findings whose path equals the given path."""
        return [f for f in self.findings if f.path == tuple(path)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "summary": {
                "ok": self.count(Severity.OK),
                "warning": self.count(Severity.WARNING),
                "critical": self.count(Severity.CRITICAL),
            },
            "findings": [f.to_dict() for f in self.findings],
            "remediation": list(self.remediation),
        }
