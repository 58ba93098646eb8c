from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from .config import NormalizeConfig
from .pipeline import normalize
from .validate import IssueSink, NormalizeIssue

# ```mermaid fence through the next closing fence. Group 1: diagram source.
MERMAID_BLOCK_RE = re.compile(r"```mermaid[ \t]*\n(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class MarkdownResult:
    text: str
    blocks: int
    changed: int
    fallbacks: int = 0
    issues: tuple[NormalizeIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return self.fallbacks == 0


def iter_mermaid_blocks(markdown: str) -> Iterator[tuple[int, str]]:
    """Yield (first_source_line_number, code) for each Mermaid fence."""
    for m in MERMAID_BLOCK_RE.finditer(markdown):
        first_line = markdown.count("\n", 0, m.start(1)) + 1
        yield first_line, m.group(1)


def normalize_markdown(
    markdown: str,
    config: Optional[NormalizeConfig] = None,
    report: Optional[IssueSink] = None,
) -> MarkdownResult:
    """Normalize every ```mermaid block; the rest of the document is untouched.

    Issue line numbers are rewritten to document line numbers.
    """
    issues: list[NormalizeIssue] = []
    blocks = 0
    changed = 0
    fallbacks = 0

    def _fix(match: re.Match) -> str:
        nonlocal blocks, changed, fallbacks
        blocks += 1
        code = match.group(1)
        offset = markdown.count("\n", 0, match.start(1))

        block_issues: list[NormalizeIssue] = []
        result = normalize(code, config, report=block_issues.append)
        for issue in block_issues:
            if issue.line is not None:
                issue = NormalizeIssue(
                    severity=issue.severity,
                    code=issue.code,
                    message=issue.message,
                    line=issue.line + offset,
                )
            issues.append(issue)
            if report is not None:
                report(issue)

        if not result.valid:
            fallbacks += 1
        if result.text != code:
            changed += 1
        return match.group(0)[: match.start(1) - match.start(0)] + result.text + "```"

    text = MERMAID_BLOCK_RE.sub(_fix, markdown)
    return MarkdownResult(
        text=text,
        blocks=blocks,
        changed=changed,
        fallbacks=fallbacks,
        issues=tuple(issues),
    )
