"""Report generation for jXSS."""

import sys

from jxss.detectors.inline_js import Finding
from jxss.reporter.text_report import TextReporter
from jxss.reporter.json_report import JSONReporter, load_findings
from jxss.reporter.csv_report import CSVReporter
from jxss.reporter.html_report import HTMLReporter

REPORTERS = {
    "text": TextReporter,
    "json": JSONReporter,
    "csv": CSVReporter,
    "html": HTMLReporter,
}


def render(findings: list[Finding], format: str = "text") -> str:
    """Render findings in the given format. Unknown formats fall back to text."""
    reporter_cls = REPORTERS.get((format or "text").lower(), TextReporter)
    reporter = reporter_cls(findings)
    if isinstance(reporter, JSONReporter):
        return reporter.to_json()
    return reporter.generate()


def write_output(findings: list[Finding], format: str = "text", filename: str | None = None):
    """Write rendered findings to ``filename``, or stdout when it is empty."""
    if filename:
        reporter_cls = REPORTERS.get((format or "text").lower(), TextReporter)
        reporter_cls(findings).save(filename)
        return
    sys.stdout.write(render(findings, format))
    sys.stdout.flush()


__all__ = [
    "TextReporter",
    "JSONReporter",
    "CSVReporter",
    "HTMLReporter",
    "load_findings",
    "render",
    "write_output",
]
