"""
CSV report generator for jXSS.
"""

import csv
import io
from pathlib import Path

from jxss.detectors.inline_js import Finding

HEADER = ["URL", "Variable", "Status", "Message"]


class CSVReporter:
    """Renders findings as CSV with a header row."""

    def __init__(self, findings: list[Finding]):
        self.findings = findings

    def generate(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(HEADER)
        for f in self.findings:
            writer.writerow([f.url, f.variable, f.status, f.message])
        return buf.getvalue()

    def save(self, filepath: str | Path):
        """Save report to file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w", newline="") as f:
            f.write(self.generate())
