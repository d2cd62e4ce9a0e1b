"""
HTML report generator for jXSS.

Renders findings as a single table page. Every cell is escaped, since URLs
and messages carry attacker-controlled text.
"""

import html
from datetime import datetime, timezone
from pathlib import Path

from jxss.detectors.inline_js import Finding


def get_html_template() -> str:
    """Return the page template."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>jXSS Results</title>
    <style>
        body {{
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            margin: 20px;
        }}

        table {{
            border-collapse: collapse;
            width: 100%;
        }}

        th, td {{
            border: 1px solid #999;
            padding: 6px 10px;
            text-align: left;
            word-break: break-all;
        }}

        th {{
            background: #eee;
        }}
    </style>
</head>
<body>
    <h1>jXSS Results</h1>
    <p>Generated on {timestamp} &middot; {total_findings} finding(s)</p>
    <table>
        <tr><th>URL</th><th>Variable</th><th>Status</th><th>Message</th></tr>
{rows}
    </table>
</body>
</html>
"""


def get_row_template() -> str:
    return "        <tr><td>{url}</td><td>{variable}</td><td>{status}</td><td>{message}</td></tr>\n"


class HTMLReporter:
    """Generates HTML reports for findings."""

    def __init__(self, findings: list[Finding]):
        self.findings = findings

    def generate(self) -> str:
        """Generate the HTML report."""
        rows = "".join(self._render_finding(f) for f in self.findings)
        return get_html_template().format(
            timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
            total_findings=len(self.findings),
            rows=rows,
        )

    def _render_finding(self, finding: Finding) -> str:
        return get_row_template().format(
            url=html.escape(finding.url),
            variable=html.escape(finding.variable),
            status=html.escape(finding.status),
            message=html.escape(finding.message),
        )

    def save(self, filepath: str | Path):
        """Save report to file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            f.write(self.generate())
