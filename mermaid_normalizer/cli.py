# mermaid_normalizer/cli.py
from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Optional

from .constants import FALLBACK_SCOPES
from .io import is_markdown_path, load_config, read_source
from .markdown import normalize_markdown
from .pipeline import normalize
from .validate import NormalizeIssue
from .writer import write_text


def _print_issue(issue: NormalizeIssue) -> None:
    if issue.severity == "info":
        return
    print(issue.format(), file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mermaid-normalize",
        description=(
            "Rewrite legacy Mermaid node shapes into shape descriptors and "
            "repair sequence diagram activation markers."
        ),
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=None,
        help="Diagram or Markdown file to normalize (default: stdin)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Where to write the result (default: stdout)",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        help=(
            "Treat the input as Markdown and normalize every ```mermaid block. "
            "Implied for .md/.markdown inputs."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with normalizer settings",
    )
    parser.add_argument(
        "--fallback-scope",
        choices=FALLBACK_SCOPES,
        default=None,
        help=(
            "On an unbalanced label revert the whole diagram (document) or only "
            "the offending lines (line). Overrides --config."
        ),
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Do not write output; exit 1 if normalization would change the input.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit 2 when any warning or error was reported.",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint."""
    args = _build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (OSError, TypeError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if args.fallback_scope:
        cfg = dataclasses.replace(cfg, fallback_scope=args.fallback_scope)

    try:
        source = read_source(args.input)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.markdown or is_markdown_path(args.input):
        md_result = normalize_markdown(source, cfg, report=_print_issue)
        text, issues = md_result.text, md_result.issues
    else:
        result = normalize(source, cfg, report=_print_issue)
        text, issues = result.text, result.issues

    if args.check:
        if text != source:
            print(f"would normalize: {args.input or '<stdin>'}", file=sys.stderr)
            return 1
        return 0

    write_text(args.output, text)

    if args.strict and any(i.severity in ("warning", "error") for i in issues):
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
