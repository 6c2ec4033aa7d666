"""Integration tests for DumpEngine, configuration and the build CLI."""

import json
from pathlib import Path

import pytest

from dna_core.config.loader import ConfigLoader
from dna_core.engine import DumpEngine

DUMPS = {
    "Draft_decompiled.lua": "\n".join(
        [
            "local T = {}",
            "T.Cost1 = { [2] = 500 }",
            'return ReadOnly("Draft", {',
            "  [1] = {",
            "    DraftId = 1,",
            '    ProductType = "Weapon",',
            "    ProductId = 10101,",
            '    Icon = "/Game/UI/Texture/Dynamic/Prop/Draft/T_Draft_Sword.T_Draft_Sword",',
            '    Resource = { {Type = "Resource", Id = 100, Num = 2}, {Type = "CharAccessory", Id = 42} },',
            "    FoundryCost = T.Cost1,",
            "  },",
            "})",
        ]
    ),
    "Weapon_decompiled.lua": "\n".join(
        [
            'return ReadOnly("Weapon", {',
            '  [10101] = { WeaponId = 10101, WeaponName = "Weapon_10101_Name", GUIPathVariableType = "Scythe" },',
            "})",
        ]
    ),
    "CharAccessory_decompiled.lua": 'return ReadOnly("CharAccessory", {\n})',
    "Mod_decompiled.lua": 'return ReadOnly("Mod", {\n  [5] = { Name = "Mod_5_Name" },\n})',
    "Resource_decompiled.lua": 'return ReadOnly("Resource", {\n  [100] = { ResourceId = 100, Name = "Res_100_Name" },\n})',
    "TextMap_ContentEN_decompiled.lua": "\n".join(
        [
            "Weapon_10101_Name = {",
            '  ContentEN = "Iron Scythe",',
            "},",
            'Res_100_Name = { ContentEN = "Ore" },',
            'WeaponType_Polearm = { ContentEN = "Polearm" },',
        ]
    ),
    "TextMap_ContentFR_decompiled.lua": 'Weapon_10101_Name = { ContentFR = "Faux de fer" }\n',
}


@pytest.fixture
def dump_dir(tmp_path: Path) -> Path:
    data = tmp_path / "Datas"
    data.mkdir()
    for name, text in DUMPS.items():
        (data / name).write_text(text, encoding="utf-8")
    icon = tmp_path / "Exports" / "Prop" / "Draft" / "T_Draft_Sword.png"
    icon.parent.mkdir(parents=True)
    icon.write_bytes(b"")
    return tmp_path


class TestDumpEngine:
    """Test the full pipeline over small dumps."""

    def test_run(self, dump_dir: Path) -> None:
        engine = DumpEngine(
            str(dump_dir / "Datas"),
            asset_dirs=[str(dump_dir / "Exports")],
            asset_root=str(dump_dir),
            workers=2,
            silent=True,
        )
        build = engine.run()

        assert engine.text.languages == ["EN", "FR"]
        assert set(engine.catalogs) == {"mods", "resources", "weapons", "char-accessories"}
        assert len(build.recipes) == 1

        recipe = build.recipes[0]
        assert recipe.icon.chosen == "Exports/Prop/Draft/T_Draft_Sword.png"
        assert recipe.product.names == {"EN": "Iron Scythe", "FR": "Faux de fer"}
        assert recipe.product.metadata["subtypeNormalized"] == "Polearm"
        assert recipe.product.metadata["subtypeLabelEn"] == "Polearm"
        assert recipe.crafting["foundryCostByCoinType"] == {"2": 500}

        ore, missing = recipe.ingredients
        assert (ore.names["FR"], ore.quantity) == ("Ore", 2)
        assert missing.source_category == "unknown"
        assert missing.names == {"EN": "CharAccessory #42", "FR": "CharAccessory #42"}

        assert build.unresolved_products == 0
        assert build.unresolved_ingredients == 1
        assert build.unresolved_icons == 0

    def test_symbol_tables_are_per_dump(self, dump_dir: Path) -> None:
        """Test same-named runtime tables in Draft and Weapon stay apart."""
        data = dump_dir / "Datas"
        draft = DUMPS["Draft_decompiled.lua"].replace("T.Cost1 = { [2] = 500 }", "T.RT_1 = { [1] = 200 }")
        (data / "Draft_decompiled.lua").write_text(draft.replace("T.Cost1,", "T.RT_1,"), encoding="utf-8")
        weapon = "\n".join(
            [
                "local T = {}",
                "T.RT_1 = { 3, 5 }",
                'return ReadOnly("Weapon", {',
                '  [10101] = { WeaponId = 10101, WeaponName = "Weapon_10101_Name", SkinApplicationType = T.RT_1 },',
                "})",
            ]
        )
        (data / "Weapon_decompiled.lua").write_text(weapon, encoding="utf-8")

        engine = DumpEngine(str(data), asset_dirs=[], workers=1, silent=True)
        recipe = engine.run().recipes[0]
        assert recipe.crafting["foundryCostByCoinType"] == {"1": 200}
        assert recipe.product.metadata["skinApplicationTypes"] == [3, 5]
        assert engine.tables["Draft"]["RT_1"] == [200]
        assert engine.tables["Weapon"]["RT_1"] == [3, 5]

    def test_guide_archive_names(self, dump_dir: Path) -> None:
        """Test ModGuideBookArchive names reach the mod catalog and the text loader."""
        data = dump_dir / "Datas"
        (data / "ModGuideBookArchive_decompiled.lua").write_text(
            'return ReadOnly("ModGuideBookArchive", {\n  [9] = { Name = "Archive_9_Name", ModList = {5} },\n})',
            encoding="utf-8",
        )
        en = DUMPS["TextMap_ContentEN_decompiled.lua"] + '\nArchive_9_Name = { ContentEN = "Blades" },'
        (data / "TextMap_ContentEN_decompiled.lua").write_text(en, encoding="utf-8")

        engine = DumpEngine(str(data), asset_dirs=[], workers=1, silent=True)
        engine.run()
        assert engine.catalogs["mods"][5].metadata["archiveId"] == 9
        assert "Archive_9_Name" in engine.wanted_text_keys()
        assert engine.text.get("EN", "Archive_9_Name") == "Blades"
        ref = engine.linker.resolve_reference("Mod", 5, 1)
        assert ref.metadata["archiveNames"]["EN"] == "Blades"

    def test_language_selection(self, dump_dir: Path) -> None:
        engine = DumpEngine(str(dump_dir / "Datas"), asset_dirs=[], languages=["fr"], workers=1, silent=True)
        build = engine.run()
        assert list(build.recipes[0].product.names) == ["FR"]

    def test_optional_resource_dump(self, dump_dir: Path) -> None:
        (dump_dir / "Datas" / "Resource_decompiled.lua").unlink()
        engine = DumpEngine(str(dump_dir / "Datas"), asset_dirs=[], workers=1, silent=True)
        build = engine.run()
        assert engine.catalogs["resources"] == {}
        assert build.unresolved_ingredients == 2

    def test_missing_required_dump(self, dump_dir: Path) -> None:
        (dump_dir / "Datas" / "Mod_decompiled.lua").unlink()
        engine = DumpEngine(str(dump_dir / "Datas"), asset_dirs=[], silent=True)
        with pytest.raises(FileNotFoundError):
            engine.run()

    def test_missing_data_dir(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            DumpEngine(str(tmp_path / "nope"), asset_dirs=[], silent=True).run()


class TestConfigLoader:
    """Test INI configuration."""

    def test_values_and_lists(self, tmp_path: Path) -> None:
        ini = tmp_path / "settings.ini"
        ini.write_text("[PATHS]\nDATA_DIR = ~/dumps\nASSET_DIRS = a, b\n  c\n", encoding="utf-8")
        cfg = ConfigLoader(ini)
        assert cfg.get("PATHS", "DATA_DIR") == str(Path("~/dumps").expanduser())
        assert cfg.get_list("PATHS", "ASSET_DIRS") == ["a", "b", "c"]
        assert cfg.get("LOCALE", "FALLBACK", fallback="EN") == "EN"
        assert cfg.resolve_path("PATHS", "MISSING") is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path / "absent.ini")


class TestBuildDraftsCli:
    """Test the devtools entry point."""

    def test_writes_json(self, dump_dir: Path) -> None:
        from devtools.build_drafts import main

        out = dump_dir / "out" / "drafts.json"
        code = main(
            [
                "--data-dir",
                str(dump_dir / "Datas"),
                "--asset-dir",
                str(dump_dir / "Exports"),
                "--asset-root",
                str(dump_dir),
                "--workers",
                "1",
                "--out",
                str(out),
            ]
        )
        assert code == 0
        doc = json.loads(out.read_text(encoding="utf-8"))
        assert doc[0]["id"] == "draft-1"
        assert doc[0]["icon"]["sourceRel"] == "Exports/Prop/Draft/T_Draft_Sword.png"

    def test_missing_dumps_exit_code(self, tmp_path: Path) -> None:
        from devtools.build_drafts import main

        assert main(["--data-dir", str(tmp_path), "--asset-dir", str(tmp_path)]) == 1
