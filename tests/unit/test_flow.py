import pytest

from mermaid_normalizer.config import NormalizeConfig
from mermaid_normalizer.converters.flow import (
    PlaceholderArena,
    convert_flow,
    convert_flow_line,
)
from mermaid_normalizer.validate import NormalizeIssue, make_emitter


@pytest.mark.parametrize(
    "legacy, shape",
    [
        ("A[Label Text]", "rect"),
        ("A(Label Text)", "rounded"),
        ("A((Label Text))", "circle"),
        ("A(((Label Text)))", "dbl-circ"),
        ("A[[Label Text]]", "subroutine"),
        ("A{{Label Text}}", "hex"),
        ("A([Label Text])", "stadium"),
        ("A[(Label Text)]", "cylinder"),
        ("A[/Label Text/]", "lean-r"),
        ("A[\\Label Text\\]", "lean-l"),
        ("A[/Label Text\\]", "trap-b"),
        ("A[\\Label Text/]", "trap-t"),
        ("A>Label Text]", "odd"),
        ("A{Label Text}", "diam"),
    ],
)
def test_legacy_shapes_convert_to_descriptors(legacy, shape):
    assert convert_flow(legacy) == f'A@{{ shape: {shape}, label: "Label Text" }}'


def test_quotes_inside_label_are_escaped():
    assert convert_flow('A["Hello World"]') == 'A@{ shape: rect, label: "\\"Hello World\\"" }'


def test_nested_brackets_stay_inside_label():
    assert convert_flow("A[Array[0]]") == 'A@{ shape: rect, label: "Array[0]" }'


def test_quoted_command_arguments_with_brackets():
    assert (
        convert_flow('H[CMD ["yarn", "start"]]')
        == 'H@{ shape: rect, label: "CMD [\\"yarn\\", \\"start\\"]" }'
    )


def test_close_bracket_inside_quotes_does_not_end_label():
    assert convert_flow('A["a ] b"]') == 'A@{ shape: rect, label: "\\"a ] b\\"" }'


@pytest.mark.parametrize(
    "line, label",
    [
        ("MetadataGen[generateMetadata()]", "generateMetadata()"),
        ("A[init() -> process() -> finish()]", "init() -> process() -> finish()"),
        ("B[getData(id, options)]", "getData(id, options)"),
        ("F[Mix [nested] and (parentheses)]", "Mix [nested] and (parentheses)"),
        ("G[f{x}]", "f{x}"),
    ],
)
def test_label_text_never_becomes_a_node(line, label):
    node_id = line.split("[", 1)[0]
    out = convert_flow(line)

    assert out == f'{node_id}@{{ shape: rect, label: "{label}" }}'
    assert out.count("@{") == 1


def test_circle_with_call_inside():
    assert convert_flow("A((f(x)))") == 'A@{ shape: circle, label: "f(x)" }'


def test_label_is_trimmed():
    assert convert_flow("A[  Padded  ]") == 'A@{ shape: rect, label: "Padded" }'


def test_url_colons_are_encoded():
    assert (
        convert_flow("A[https://example.com]")
        == 'A@{ shape: rect, label: "https&#58;//example.com" }'
    )


def test_url_colons_kept_when_disabled():
    cfg = NormalizeConfig(escape_url_colons=False)
    assert (
        convert_flow("A[https://example.com]", cfg)
        == 'A@{ shape: rect, label: "https://example.com" }'
    )


def test_nodes_on_arrow_lines():
    assert (
        convert_flow("A[Start] --> B[End]")
        == 'A@{ shape: rect, label: "Start" } --> B@{ shape: rect, label: "End" }'
    )


def test_multiple_shapes_on_one_line():
    assert convert_flow("A[First] --> B(Second) --> C((Third))") == (
        'A@{ shape: rect, label: "First" } --> '
        'B@{ shape: rounded, label: "Second" } --> '
        'C@{ shape: circle, label: "Third" }'
    )


def test_multiline_diagram_keeps_header_and_indent():
    source = "\n".join(
        [
            "graph TD",
            "  A[Start] --> B{Decision}",
            "  B --> C[Option 1]",
            "  B --> D[Option 2]",
        ]
    )
    expected = "\n".join(
        [
            "graph TD",
            '  A@{ shape: rect, label: "Start" } --> B@{ shape: diam, label: "Decision" }',
            '  B --> C@{ shape: rect, label: "Option 1" }',
            '  B --> D@{ shape: rect, label: "Option 2" }',
        ]
    )
    assert convert_flow(source) == expected


def test_edge_label_is_quoted():
    assert convert_flow("A --> |Label| B") == 'A --> |"Label"| B'


def test_edge_label_already_quoted_is_unchanged():
    assert convert_flow('A -->|"Already Quoted"| B') == 'A -->|"Already Quoted"| B'


def test_edge_label_is_trimmed_and_escaped():
    assert convert_flow('A ---| say "hi" | B') == 'A ---|"say \\"hi\\""| B'


def test_edge_label_text_is_not_scanned_for_shapes():
    out = convert_flow("A -->|call f(x)| B[Done]")

    assert out == 'A -->|"call f(x)"| B@{ shape: rect, label: "Done" }'
    assert "f@{" not in out


def test_edge_label_quoting_can_be_disabled():
    cfg = NormalizeConfig(quote_edge_labels=False)
    assert convert_flow("A -->|yes| B[Done]", cfg) == 'A -->|yes| B@{ shape: rect, label: "Done" }'


@pytest.mark.parametrize(
    "line",
    [
        "flowchart LR",
        "graph TD",
        "",
        "   ",
        "%% A[commented out]",
        "subgraph api[API Layer]",
        "end",
        "classDef hot fill:#f96",
        "class A,B hot",
        "style A fill:#bbf",
        "click A callback()",
        "direction TB",
    ],
)
def test_structural_lines_pass_through(line):
    assert convert_flow_line(line) == line


def test_canonical_line_is_left_untouched():
    line = '    Browser --> FE_Layout@{ shape: rect, label: "RootLayout (app/[locale]/layout.tsx)" }'
    assert convert_flow_line(line) == line


def test_conversion_is_idempotent():
    source = "\n".join(
        [
            "flowchart TD",
            "  A[Start] -->|go| B(Work (step 1))",
            "  B --> C{{Check}}",
            "  C -->|\"done\"| D[[Finish]]",
        ]
    )
    once = convert_flow(source)
    assert convert_flow(once) == once


def test_unclosed_delimiter_stops_line_and_warns():
    issues: list[NormalizeIssue] = []
    emit = make_emitter(NormalizeConfig(), issues)

    line = "A[oops --> B[ok]"
    assert convert_flow_line(line, emit=emit, line_no=3) == line
    assert [(i.code, i.line) for i in issues] == [("W_UNCLOSED_DELIMITER", 3)]


def test_empty_brackets_are_not_nodes():
    assert convert_flow("A[] --> B()") == "A[] --> B()"


def test_arena_resolves_reservations_in_position_order():
    arena = PlaceholderArena()
    line = "A[x] --> B[y]"
    arena.reserve(9, 13, "B2")
    arena.reserve(0, 4, "A2")

    assert len(arena) == 2
    assert arena.reserved_end(2) == 4
    assert arena.reserved_end(5) is None
    assert arena.resolve(line) == "A2 --> B2"


def test_arena_outer_reservation_swallows_inner():
    arena = PlaceholderArena()
    arena.reserve(3, 6, "inner")
    assert arena.crosses(0, 5) is True
    assert arena.crosses(0, 8) is False

    arena.reserve(0, 8, "outer")
    assert len(arena) == 1
    assert arena.resolve("0123456789") == "outer89"


def test_quotes_pairing_across_nodes_do_not_merge_them():
    assert convert_flow('A[it\'s "x] --> B["y]') == (
        'A@{ shape: rect, label: "it\'s \\"x" } --> B@{ shape: rect, label: "\\"y" }'
    )
