"""
JSON report generator for jXSS.
"""

import json
from pathlib import Path
from typing import Any

from jxss.detectors.inline_js import Finding


class JSONReporter:
    """Renders findings as a JSON array."""

    def __init__(self, findings: list[Finding]):
        self.findings = findings

    def generate(self) -> list[dict[str, Any]]:
        """Generate the JSON report structure."""
        return [f.to_dict() for f in self.findings]

    def to_json(self, indent: int = 2) -> str:
        """Generate JSON string."""
        return json.dumps(self.generate(), indent=indent) + "\n"

    def save(self, filepath: str | Path):
        """Save report to file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            f.write(self.to_json())


def load_findings(text: str) -> list[Finding]:
    """Parse a JSON report back into findings."""
    data = json.loads(text)
    if data is None:
        return []
    return [Finding.from_dict(item) for item in data]
