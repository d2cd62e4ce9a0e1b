"""Plain text report: one ``[status] variable - url`` line per finding."""

from pathlib import Path

from jxss.detectors.inline_js import Finding


class TextReporter:
    def __init__(self, findings: list[Finding]):
        self.findings = findings

    def generate(self) -> str:
        return "".join(f"[{f.status}] {f.variable} - {f.url}\n" for f in self.findings)

    def save(self, filepath: str | Path):
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            f.write(self.generate())
