from mermaid_normalizer.markdown import iter_mermaid_blocks, normalize_markdown
from mermaid_normalizer.validate import NormalizeIssue

DOC = """# Architecture

Some text with A[not a diagram].

```mermaid
graph TD
    A[Start] --> B(End)
```

```python
x = A[0]
```

```mermaid
sequenceDiagram
    A->>B: ping; pong
```
"""


def test_blocks_are_normalized_and_prose_is_untouched():
    result = normalize_markdown(DOC)

    assert result.blocks == 2
    assert result.changed == 2
    assert result.valid is True
    assert "Some text with A[not a diagram]." in result.text
    assert "x = A[0]" in result.text
    assert (
        '    A@{ shape: rect, label: "Start" } --> B@{ shape: rounded, label: "End" }\n'
        in result.text
    )
    assert "    A->>B: ping#59; pong\n" in result.text
    assert result.text.count("\n") == DOC.count("\n")


def test_iter_mermaid_blocks_reports_first_line():
    blocks = list(iter_mermaid_blocks(DOC))

    assert [line for line, _ in blocks] == [6, 15]
    assert blocks[0][1].startswith("graph TD\n")


def test_issue_lines_are_document_lines():
    doc = "# T\n\ntext\n\n```mermaid\ngraph TD\n    A[open( paren] --> B\n```\n"
    seen: list[NormalizeIssue] = []

    result = normalize_markdown(doc, report=seen.append)

    assert result.valid is False
    assert result.fallbacks == 1
    assert result.changed == 0
    assert result.text == doc
    assert [(i.code, i.line) for i in result.issues] == [("W_UNBALANCED_LABEL", 7)]
    assert tuple(seen) == result.issues


def test_document_without_mermaid_is_unchanged():
    doc = "just prose\n"
    result = normalize_markdown(doc)

    assert result.text == doc
    assert result.blocks == 0
    assert result.changed == 0
