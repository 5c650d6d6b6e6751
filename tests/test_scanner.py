"""
Tests for the declaration scanner (variable catalog).
"""

import pytest

from crowbar.parser import parse, serialize
from crowbar.scanner import find_entry, scan
from crowbar.schemas import EntryId, ValueKind


def catalog(text):
    return {str(entry.id): entry for entry in scan(parse(text))}


class TestSampleCatalog:

    @pytest.fixture
    def entries(self, sample_text):
        return scan(parse(sample_text))

    def test_document_order(self, entries):
        assert [str(entry.id) for entry in entries] == [
            "MAX_RETRIES",
            "GREETING",
            "x",
            "ratio",
            "verbose",
            "name",
            "retries",
            "owned",
            "offset",
            "x#1",
        ]

    def test_call_initializers_are_skipped(self, entries):
        assert all(entry.name != "y" for entry in entries)
        assert all(entry.name != "v" for entry in entries)

    def test_kinds_and_values(self, entries):
        by_id = {str(entry.id): entry for entry in entries}
        assert by_id["x"].kind is ValueKind.INTEGER
        assert by_id["x"].value.value == 5
        assert by_id["x"].type_hint == "i32"
        assert by_id["ratio"].kind is ValueKind.FLOAT
        assert by_id["ratio"].mutable
        assert by_id["verbose"].value.value is False
        assert by_id["name"].value.value == "hello"
        assert by_id["offset"].value.value == -12
        assert by_id["x#1"].value.value == 31
        assert by_id["GREETING"].binding == "static"
        assert by_id["MAX_RETRIES"].binding == "const"

    def test_constant_reference(self, entries, sample_text):
        retries = next(entry for entry in entries if entry.name == "retries")
        assert retries.origin == "constant"
        assert retries.constant == "MAX_RETRIES"
        assert retries.value.value == 3
        assert sample_text[retries.span.start:retries.span.end] == "MAX_RETRIES"

    def test_string_conversion(self, entries, sample_text):
        owned = next(entry for entry in entries if entry.name == "owned")
        assert owned.origin == "conversion"
        assert owned.value.value == "crowbar"
        assert sample_text[owned.span.start:owned.span.end] == '"crowbar"'

    def test_lines(self, entries, sample_text):
        by_id = {str(entry.id): entry for entry in entries}
        lines = sample_text.splitlines()
        assert "let x: i32 = 5;" in lines[by_id["x"].line - 1]
        assert "let x = 0x1F;" in lines[by_id["x#1"].line - 1]

    def test_stable_across_serialize_and_reparse(self, entries, sample_text):
        again = scan(parse(serialize(parse(sample_text))))
        assert again == entries

    def test_json_dump(self, entries):
        dumped = entries[2].model_dump(mode="json")
        assert dumped["id"] == {"name": "x", "occurrence": 0}
        assert dumped["display"] == "x: i32 = 5"
        assert dumped["value"]["kind"] == "integer"
        assert "span" not in dumped

    def test_find_entry(self, entries):
        assert find_entry(entries, EntryId(name="x", occurrence=1)).value.value == 31
        assert find_entry(entries, EntryId(name="x", occurrence=2)) is None


class TestClassification:

    def test_negative_with_space(self):
        entries = catalog("let a = - 2.5;")
        assert entries["a"].value.value == -2.5

    def test_minus_with_comment_is_not_eligible(self):
        assert catalog("let a = - /* c */ 2;") == {}

    def test_expressions_are_skipped(self):
        text = (
            "let a = 1 + 2;\n"
            "let b = foo.bar;\n"
            "let c = [1, 2];\n"
            "let d = P { x: 1 };\n"
            "let e = (1);\n"
            "let f = !true;\n"
            "let g = 'c';\n"
            "let h = b\"bytes\";\n"
            "let i;\n"
        )
        assert catalog(text) == {}

    def test_destructuring_is_skipped(self):
        assert catalog("let (a, b) = (1, 2);") == {}

    def test_unterminated_declaration_is_skipped(self):
        assert catalog("fn main() { let x = 5 }") == {}

    def test_occurrence_counts_skipped_declarations(self):
        entries = catalog("let a = f();\nlet a = 1;")
        assert list(entries) == ["a#1"]

    def test_nested_declarations(self):
        entries = catalog("fn main() { let a = { let b = 2; b }; }")
        assert list(entries) == ["b"]

    def test_to_string_and_to_owned(self):
        entries = catalog('let a = "x".to_string();\nlet b = r"y".to_owned();\nlet c = "z".len();')
        assert entries["a"].value.value == "x"
        assert entries["b"].value.value == "y"
        assert "c" not in entries

    def test_string_from_needs_single_literal(self):
        assert catalog('let a = String::from(name);') == {}
        assert catalog('let a = String::new();') == {}

    def test_undecodable_literal_is_excluded(self):
        entries = catalog('let a = "bad \\q";\nlet b = 1e999;\nlet c = 1;')
        assert list(entries) == ["c"]

    def test_constant_preceding_definition_wins(self):
        text = (
            "const N: i32 = 1;\n"
            "fn a() { let x = N; }\n"
            "mod m { const N: i32 = 2; fn b() { let y = N; } }\n"
        )
        entries = catalog(text)
        assert entries["x"].value.value == 1
        assert entries["y"].value.value == 2

    def test_constant_defined_later(self):
        entries = catalog("fn main() { let x = LIMIT; }\nconst LIMIT: u64 = 0xFF;")
        assert entries["x"].value.value == 255
        assert entries["x"].value.style.base == 16

    def test_one_hop_only(self):
        entries = catalog("const A: i32 = 1;\nconst B: i32 = A;\nfn main() { let x = B; }")
        assert "B" in entries
        assert entries["B"].origin == "constant"
        assert "x" not in entries

    def test_mutable_static_is_not_a_constant(self):
        entries = catalog("static mut COUNT: i32 = 0;\nfn main() { let c = COUNT; }")
        assert "COUNT" in entries
        assert "c" not in entries

    def test_unknown_identifier(self):
        assert catalog("fn main() { let x = other; }") == {}

    def test_self_reference_is_skipped(self):
        assert catalog("const A: i32 = A;") == {}

    def test_chained_assignment_is_skipped(self):
        entries = catalog("fn main() { let mut b = 0; let a = b = 5; }")
        assert list(entries) == ["b"]

    def test_if_let_initializer_is_skipped(self):
        text = "fn main() { let o = Some(3); let a = if let Some(v) = o { 1 } else { 2 }; let c = 4; }"
        assert list(catalog(text)) == ["c"]

    def test_type_closed_next_to_equals(self):
        entries = catalog("fn main() { let v: Vec<Vec<u8>>= 5; }")
        assert entries["v"].type_hint == "Vec<Vec<u8>>"
        assert entries["v"].value.value == 5

    def test_byte_order_mark(self):
        entries = catalog("\ufefffn main() { let x: i32 = 5; }\n")
        assert entries["x"].value.value == 5


class TestEntryId:

    @pytest.mark.parametrize("text, expected", [
        ("x", EntryId(name="x")),
        ("x#2", EntryId(name="x", occurrence=2)),
        ("r#type", EntryId(name="r#type")),
        ("r#type#1", EntryId(name="r#type", occurrence=1)),
    ])
    def test_parse(self, text, expected):
        assert EntryId.parse(text) == expected
        assert str(expected) == text

    def test_raw_identifier_entries(self):
        entries = scan(parse("fn main() { let r#type = 1; let r#type = 2; }"))
        assert [str(entry.id) for entry in entries] == ["r#type", "r#type#1"]
        assert find_entry(entries, EntryId.parse("r#type#1")).value.value == 2
