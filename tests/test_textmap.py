"""Unit tests for TextMap localization loading."""

from pathlib import Path

import pytest

from dna_core.parsers.textmap import TextTable, discover_language_files, load_text_map, load_text_maps


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadTextMap:
    """Test per-file key extraction."""

    def test_inline_block(self, tmp_path: Path) -> None:
        """Test one-line blocks with several languages."""
        f = _write(tmp_path / "TextMap_ContentFR_decompiled.lua", 'Key_A = { ContentFR = "Bonjour", ContentEN = "Hello" }\n')
        assert load_text_map(f, {"Key_A"}) == {"Key_A": {"FR": "Bonjour", "EN": "Hello"}}

    def test_absent_key_has_no_entry(self, tmp_path: Path) -> None:
        f = _write(tmp_path / "TextMap_ContentFR_decompiled.lua", 'Key_A = { ContentFR = "Bonjour" }\n')
        assert load_text_map(f, {"Key_Z"}) == {}

    def test_multiline_blocks_and_escapes(self, tmp_path: Path) -> None:
        """Test multi-line blocks, unwanted keys and byte escapes."""
        text = "\n".join(
            [
                'return ReadOnly("TextMap_ContentCN", {',
                "  Skip_Me = {",
                '    ContentCN = "x",',
                "  },",
                "  UI_Armory_Longrange = {",
                '    ContentCN = "\\232\\191\\156\\231\\168\\139",',
                "  },",
                "})",
            ]
        )
        f = _write(tmp_path / "TextMap_ContentCN_decompiled.lua", text)
        assert load_text_map(f, ["UI_Armory_Longrange"]) == {"UI_Armory_Longrange": {"CN": "远程"}}

    def test_language_filter(self, tmp_path: Path) -> None:
        f = _write(tmp_path / "TextMap_ContentFR_decompiled.lua", 'Key_A = { ContentFR = "Bonjour", ContentEN = "Hello" }\n')
        assert load_text_map(f, {"Key_A"}, languages=["en"]) == {"Key_A": {"EN": "Hello"}}


class TestTextTable:
    """Test merged lookups."""

    def test_lookup_preference_and_fallback(self) -> None:
        table = TextTable({"FR": {"Key_A": "Bonjour"}, "EN": {"Key_A": "Hello", "Key_B": "Bye"}})
        assert table.lookup("Key_A") == "Bonjour"
        assert table.lookup("Key_B") == "Bye"
        assert table.lookup("Key_Z") == "Key_Z"

    def test_translate(self) -> None:
        table = TextTable({"FR": {"Key_A": "Bonjour"}, "EN": {"Key_B": "Bye"}})
        assert table.translate("Key_B", "FR") == "Bye"
        assert table.translate("Key_Z", "FR") == "Key_Z"
        assert table.translate(None, "FR") is None
        assert table.translations("Key_A") == {"FR": "Bonjour"}


class TestDiscoveryAndMerge:
    """Test language discovery and merged loading."""

    @pytest.mark.parametrize("workers", [1, 3])
    def test_load_text_maps(self, tmp_path: Path, workers: int) -> None:
        _write(tmp_path / "TextMap_ContentFR_decompiled.lua", 'Key_A = { ContentFR = "Bonjour" }\n')
        _write(tmp_path / "TextMap_ContentEN_decompiled.lua", 'Key_A = { ContentEN = "Hello" }\n')
        _write(tmp_path / "Weapon_decompiled.lua", "")

        files = discover_language_files(tmp_path)
        assert [lf.code for lf in files] == ["EN", "FR"]

        table = load_text_maps(files, {"Key_A", "Key_Z"}, workers=workers)
        assert table.languages == ["EN", "FR"]
        assert table.translations("Key_A") == {"EN": "Hello", "FR": "Bonjour"}
        assert table.lookup("Key_Z", preferred=("FR", "EN")) == "Key_Z"

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            discover_language_files(tmp_path / "nope")
