"""Unit tests for table-literal parsing, runtime tables and entry extraction."""

import pytest

from dna_core.errors import TableNotFoundError
from dna_core.lua.entries import extract_entries, extract_int_map, extract_readonly_entries, extract_table_entries
from dna_core.lua.expr import LuaTableParser, parse_table_literal, to_lua_literal
from dna_core.lua.runtime import parse_runtime_tables, reference_name, resolve_field, resolve_references


class TestTableLiteralShapes:
    """Test list versus dict disambiguation."""

    def test_bare_sequence_is_list(self) -> None:
        """Test bare entries 1..n produce a list."""
        assert parse_table_literal("{1, 2, 3}") == [1, 2, 3]

    def test_explicit_contiguous_keys_is_list(self) -> None:
        """Test explicit keys 1..n produce a list in index order."""
        assert parse_table_literal('{[2] = "b", [1] = "a"}') == ["a", "b"]

    def test_gap_forces_dict(self) -> None:
        """Test non-contiguous integer keys produce a dict."""
        assert parse_table_literal("{[1] = 1, [3] = 3}") == {"1": 1, "3": 3}

    def test_named_key_forces_dict(self) -> None:
        """Test named keys come first, then integer keys ascending."""
        value = parse_table_literal("{ b = 1, [2] = 2, a = 3, [1] = 1 }")
        assert value == {"b": 1, "a": 3, "1": 1, "2": 2}
        assert list(value.keys()) == ["b", "a", "1", "2"]

    def test_empty_table_is_list(self) -> None:
        """Test `{}` is an empty list."""
        assert parse_table_literal("{}") == []

    def test_implicit_cursor_skips_claimed_index(self) -> None:
        """Test bare entries after an explicit key continue past it."""
        assert parse_table_literal('{"a", [2] = "b", "c"}') == ["a", "b", "c"]
        assert parse_table_literal('{[2] = "b", "c"}') == {"2": "b", "3": "c"}

    def test_digit_string_key_normalized(self) -> None:
        """Test `["1"]` keys behave as integer keys."""
        assert parse_table_literal('{["1"] = "x"}') == ["x"]

    def test_non_positive_keys_are_named(self) -> None:
        """Test zero and negative keys become named string keys."""
        assert parse_table_literal("{[0] = 5, [-1] = 6}") == {"0": 5, "-1": 6}


class TestTableLiteralValues:
    """Test value dispatch inside tables."""

    def test_literals_and_references(self) -> None:
        """Test booleans, nil and symbolic references."""
        value = parse_table_literal("{ flag = true, off = false, none = nil, ref = T.Foo }")
        assert value == {"flag": True, "off": False, "none": None, "ref": "T.Foo"}

    def test_comments_skipped(self) -> None:
        """Test `--` line comments are ignored."""
        assert parse_table_literal("{ -- header\n 1, -- one\n 2 }") == [1, 2]

    def test_nested_tables(self) -> None:
        """Test nested tables and escaped strings."""
        value = parse_table_literal('{ {Type = "Resource", Id = 100}, {"\\65"} }')
        assert value == [{"Type": "Resource", "Id": 100}, ["A"]]

    def test_unparsable_char_skipped(self) -> None:
        """Test stray characters inside a table are skipped."""
        assert parse_table_literal("{1, ?, 2}") == [1, 2]

    def test_top_level_failures(self) -> None:
        """Test nothing parseable yields None."""
        assert parse_table_literal("") is None
        assert parse_table_literal("???") is None

    def test_trailing_content_ignored(self) -> None:
        """Test the parser stops after one expression."""
        parser = LuaTableParser("{1} trailing")
        assert parser.parse() == [1]
        assert parser.pos == 4

    def test_depth_limit(self) -> None:
        """Test over-deep nesting is refused instead of recursing."""
        assert parse_table_literal("{" * 100 + "}" * 100) is None
        assert parse_table_literal("{{{}}}") == [[[]]]
        assert parse_table_literal("{{{}}}", max_depth=2) is None

    def test_rendered_literal_parses_back(self) -> None:
        """Test to_lua_literal output is accepted by the parser."""
        value = {"Name": 'say "hi"', "2": [1, 2.5], "flag": False}
        assert parse_table_literal(to_lua_literal(value)) == value


class TestReferenceResolver:
    """Test runtime tables and symbolic references."""

    SOURCE = "\n".join(
        [
            "local T = {}",
            "T.Cost = { [1] = 200, [3] = 50 }",
            "T.Skins = {",
            "  3,",
            "  5,",
            "}",
            "T.Alias = T.Skins",
            "T.Nothing = nil",
        ]
    )

    def test_parse_runtime_tables(self) -> None:
        """Test single and multi-line definitions are collected."""
        tables = parse_runtime_tables(self.SOURCE)
        assert tables["Cost"] == {"1": 200, "3": 50}
        assert tables["Skins"] == [3, 5]
        assert tables["Alias"] == "T.Skins"
        assert "Nothing" in tables and tables["Nothing"] is None

    def test_resolve_nested_references(self) -> None:
        """Test references resolve recursively inside containers."""
        tables = parse_runtime_tables(self.SOURCE)
        assert resolve_references({"skins": "T.Alias", "n": 1}, tables) == {"skins": [3, 5], "n": 1}
        assert resolve_references("T.Missing", tables) == "T.Missing"

    def test_cycle_terminates(self) -> None:
        """Test A -> B -> A stops instead of looping."""
        tables = parse_runtime_tables("T.A = { next = T.B }\nT.B = { next = T.A }")
        value = resolve_references("T.A", tables)
        assert isinstance(value, dict)
        assert value != "T.A"
        assert value == {"next": {"next": "T.A"}}

    def test_self_reference_string(self) -> None:
        """Test a string-only cycle returns the reference unchanged."""
        tables = {"A": "T.B", "B": "T.A"}
        assert resolve_references("T.A", tables) == "T.A"

    def test_resolve_field(self) -> None:
        """Test opaque field text is re-parsed then resolved."""
        tables = parse_runtime_tables(self.SOURCE)
        assert resolve_field("T.Cost", tables) == {"1": 200, "3": 50}
        assert resolve_field('{"Key_A", "Key_B"}', tables) == ["Key_A", "Key_B"]
        assert resolve_field([1, 2], tables) == [1, 2]
        assert resolve_field(None, tables) is None

    def test_reference_name(self) -> None:
        """Test reference detection."""
        assert reference_name("T.Foo") == "Foo"
        assert reference_name("T.Foo.Bar") is None
        assert reference_name(3) is None


WEAPON_DUMP = "\n".join(
    [
        'return ReadOnly("Weapon", {',
        "  [10101] = {",
        "    WeaponId = 10101,",
        '    WeaponName = "Weapon_10101_Name",',
        "    SkinApplicationType = T.SkinTypes,",
        "    Tags = {1, 2},",
        "  },",
        '  [20101] = { WeaponId = 20101, GUIPathVariableType = "Broadsword" },',
        "})",
        "[99] = { Outside = true }",
    ]
)


class TestEntryExtraction:
    """Test flat entry table extraction."""

    def test_readonly_entries(self) -> None:
        """Test inline and multi-line rows inside a ReadOnly table."""
        rows = extract_readonly_entries(WEAPON_DUMP, "Weapon")
        assert [r.key for r in rows] == [10101, 20101]
        first = rows[0]
        assert first.fields == {
            "WeaponId": 10101,
            "WeaponName": "Weapon_10101_Name",
            "SkinApplicationType": "T.SkinTypes",
            "Tags": [1, 2],
        }
        assert first.raw_text.startswith("  [10101] = {")
        assert rows[1].fields["GUIPathVariableType"] == "Broadsword"

    def test_readonly_missing_marker(self) -> None:
        """Test a missing marker raises with table name and path."""
        with pytest.raises(TableNotFoundError) as exc:
            extract_readonly_entries(WEAPON_DUMP, "Draft", path="Draft_decompiled.lua")
        assert exc.value.table_name == "Draft"
        assert exc.value.path == "Draft_decompiled.lua"
        assert isinstance(exc.value, LookupError)

    def test_bare_table_multiline(self) -> None:
        """Test a bare table stops where its braces balance."""
        source = "\n".join(
            [
                "Items = {",
                '  [1] = { Name = "Key_A" },',
                "  [2] = {",
                "    Cost = 5,",
                "  },",
                "}",
                '[3] = { Name = "after" }',
            ]
        )
        rows = extract_table_entries(source, "Items")
        assert [(r.key, r.fields) for r in rows] == [(1, {"Name": "Key_A"}), (2, {"Cost": 5})]

    def test_bare_table_row_on_opener_line(self) -> None:
        """Test rows that start on the same line as the table opener."""
        source = "\n".join(
            [
                'Items = { [1] = { Name = "Key_A" },',
                "  [2] = { Cost = 5 },",
                "}",
            ]
        )
        rows = extract_table_entries(source, "Items")
        assert [(r.key, r.fields) for r in rows] == [(1, {"Name": "Key_A"}), (2, {"Cost": 5})]

        source = "local Items = { [1] = {\n  Cost = 7,\n},\n}"
        assert [(r.key, r.fields) for r in extract_table_entries(source, "Items")] == [(1, {"Cost": 7})]

    def test_bare_table_single_line(self) -> None:
        """Test a table written on one line."""
        source = 'Items = { [1] = { Name = "Key_A", Cost = 10 }, [2] = { Name = "Key_B", Cost = "#1" } }'
        rows = extract_table_entries(source, "Items")
        assert [r.key for r in rows] == [1, 2]
        assert rows[1].fields == {"Name": "Key_B", "Cost": "#1"}

    def test_bare_table_missing(self) -> None:
        """Test a missing bare table raises."""
        with pytest.raises(TableNotFoundError):
            extract_table_entries("Other = {}", "Items")

    def test_extract_entries_negative_keys(self) -> None:
        """Test negative row keys."""
        rows = extract_entries("[-1] = { A = 1 }\nnoise\n[2] = { B = 2 }")
        assert [(r.key, r.fields) for r in rows] == [(-1, {"A": 1}), (2, {"B": 2})]

    def test_int_map(self) -> None:
        """Test `[n] = m` lookup tables."""
        source = 'return ReadOnly("ModId2ArchiveId", {\n  [101] = 7,\n  [102] = 8,\n})'
        assert extract_int_map(source) == {101: 7, 102: 8}
