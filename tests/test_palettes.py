"""Tests for categories, the palette catalog and palette configuration files."""

import json
import logging

import pytest
import yaml

from texrecolor.color.model import Color
from texrecolor.palettes.catalog import (
    SLOT_NAMES,
    DefaultPalettes,
    HsvTarget,
    PaletteCatalog,
    get_palette,
)
from texrecolor.palettes.categories import (
    Category,
    MonsterTable,
    lookup_category,
    monsno_from_bundle,
    resolve_category,
)
from texrecolor.palettes.loader import (
    PaletteConfigError,
    PaletteConfigLoader,
    render_default_palette_config,
    write_default_palette_config,
)

FULL_ENTRY = {
    "primary": "#102030",
    "secondary": "#203040",
    "accent": "#304050",
    "dark": "#405060",
    "light": "#506070",
    "neutral": "#607080",
}


class TestCategories:
    """Test category lookup and resolution."""

    def test_eighteen_categories(self):
        assert len(Category) == 18
        assert Category.NORMAL == 0
        assert Category.FAIRY == 17

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Category.WATER, Category.WATER),
            (10, Category.WATER),
            ("10", Category.WATER),
            ("water", Category.WATER),
            (" Fire ", Category.FIRE),
            (99, None),
            (-1, None),
            ("lava", None),
            (True, None),
            (None, None),
        ],
    )
    def test_lookup(self, value, expected):
        assert lookup_category(value) == expected

    def test_resolve_unknown_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="texrecolor"):
            assert resolve_category(42) == Category.NORMAL
        assert "Unknown category" in caplog.text

    def test_resolve_custom_default(self):
        assert resolve_category("nope", default=Category.STEEL) == Category.STEEL

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("pm0025_00_00", 25),
            ("PM0150_01", 150),
            ("pm0025_00_00_extra", None),
            ("pm25_00_00", None),
            ("texture", None),
        ],
    )
    def test_monsno_from_bundle(self, name, expected):
        assert monsno_from_bundle(name) == expected


class TestMonsterTable:
    """Test loading of the personal table."""

    def write_table(self, tmp_path, entries):
        path = tmp_path / "personal.json"
        path.write_text(json.dumps({"Personal": entries}))
        return path

    def test_from_json(self, tmp_path):
        path = self.write_table(
            tmp_path,
            [
                {"monsno": 0, "type1": 5},
                {"monsno": 1, "type1": 11, "type2": 3},
                {"monsno": 4, "type1": 9},
                {"monsno": 4, "type1": 15},
            ],
        )
        table = MonsterTable.from_json(path)

        assert len(table) == 2
        assert 0 not in table
        assert table.category_for(1) == Category.GRASS
        # First form wins
        assert table.category_for(4) == Category.FIRE

    def test_category_for_bundle(self, tmp_path):
        table = MonsterTable.from_json(self.write_table(tmp_path, [{"monsno": 7, "type1": 10}]))
        assert table.category_for_bundle("pm0007_00_00") == Category.WATER
        assert table.category_for_bundle("pm0008_00_00") == Category.NORMAL
        assert table.category_for_bundle("not_a_bundle") == Category.NORMAL

    def test_unknown_type_falls_back(self, tmp_path):
        table = MonsterTable.from_json(self.write_table(tmp_path, [{"monsno": 3, "type1": 40}]))
        assert table.category_for(3) == Category.NORMAL

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MonsterTable.from_json(tmp_path / "missing.json")

    def test_invalid_format(self, tmp_path):
        path = tmp_path / "personal.json"
        path.write_text(json.dumps({"Other": []}))
        with pytest.raises(ValueError):
            MonsterTable.from_json(path)


class TestPaletteCatalog:
    """Test built-in palettes and lookup."""

    def test_every_category_has_palette_and_target(self):
        palettes = DefaultPalettes.create_palettes()
        targets = DefaultPalettes.create_hsv_targets()
        assert set(palettes) == set(Category)
        assert set(targets) == set(Category)

    def test_water_palette(self):
        palette = get_palette(Category.WATER)
        assert palette.primary == Color(60, 120, 200)
        assert palette.dark == Color(20, 60, 120)
        assert palette.hsv_target.hue == pytest.approx(0.67)
        assert [slot for slot, _, _ in palette.slots()] == list(SLOT_NAMES)

    def test_slot_weights(self):
        weights = [weight for _, _, weight in get_palette(Category.FIRE).slots()]
        assert weights == [1.0, 0.9, 0.8, 0.7, 0.7, 0.6]

    def test_lookup_by_name_and_int(self):
        assert get_palette("fire") == get_palette(9)

    def test_unknown_id_uses_default_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="texrecolor"):
            palette = get_palette(99)
        assert palette.category == Category.NORMAL
        assert caplog.text.count("Unknown category") == 1

    def test_custom_default_category(self):
        catalog = PaletteCatalog(default_category=Category.DARK)
        assert catalog.get_palette("unknown").category == Category.DARK

    def test_overrides_take_priority(self):
        override = DefaultPalettes.create_palettes()[Category.ICE]
        catalog = PaletteCatalog(
            palette_overrides={Category.FIRE: override},
            hsv_overrides={Category.FIRE: HsvTarget(0.5, 0.5, 0.5)},
        )
        palette = catalog.get_palette(Category.FIRE)
        assert palette.primary == override.primary
        assert palette.hsv_target.hue == pytest.approx(0.5)
        assert catalog.is_overridden(Category.FIRE)
        assert not catalog.is_overridden(Category.WATER)
        assert catalog.get_palette(Category.WATER) == get_palette(Category.WATER)

    def test_hsv_target_clamped(self):
        target = HsvTarget(1.5, -0.2, 0.5)
        assert (target.hue, target.saturation, target.value) == (1.0, 0.0, 0.5)


class TestPaletteConfigLoader:
    """Test palette override files."""

    def setup_method(self):
        """Set up test fixtures."""
        self.loader = PaletteConfigLoader()

    def test_full_entry(self):
        overrides = self.loader.parse({"categories": {"Fire": FULL_ENTRY}})
        assert overrides.success_count == 1
        assert overrides.palettes[Category.FIRE].primary == Color(16, 32, 48)
        assert Category.FIRE not in overrides.hsv_targets

    def test_legacy_key(self):
        overrides = self.loader.parse({"pokemon_types": {"water": FULL_ENTRY}})
        assert Category.WATER in overrides.palettes

    def test_short_hex(self):
        entry = {slot: "#f80" for slot in SLOT_NAMES}
        overrides = self.loader.parse({"categories": {"electric": entry}})
        assert overrides.palettes[Category.ELECTRIC].accent == Color(255, 136, 0)

    def test_missing_slot_rejects_entry(self):
        entry = dict(FULL_ENTRY)
        del entry["neutral"]
        overrides = self.loader.parse({"categories": {"fire": entry}})
        assert overrides.is_empty
        assert overrides.error_count == 1

    def test_invalid_hex_rejects_whole_entry(self):
        entry = dict(FULL_ENTRY, dark="#zzzzzz")
        entry["hue_shift_hsv"] = {"hue": 0.2, "saturation": 0.5, "value": 0.5}
        overrides = self.loader.parse({"categories": {"fire": entry}})
        assert overrides.is_empty
        assert "Fire" in overrides.errors[0]

    def test_hsv_only_entry(self):
        data = {"categories": {"fire": {"hue_shift_hsv": {"hue": 0.1, "saturation": 2.0, "value": 0.5}}}}
        overrides = self.loader.parse(data)

        assert Category.FIRE not in overrides.palettes
        target = overrides.hsv_targets[Category.FIRE]
        assert target.hue == pytest.approx(0.1)
        assert target.saturation == 1.0

        catalog = PaletteCatalog(overrides.palettes, overrides.hsv_targets)
        assert catalog.get_palette(Category.FIRE).primary == get_palette(Category.FIRE).primary
        assert catalog.get_hsv_target(Category.FIRE).hue == pytest.approx(0.1)

    def test_entry_without_colors_is_error(self):
        overrides = self.loader.parse({"categories": {"fire": {"notes": "todo"}}})
        assert overrides.error_count == 1

    def test_unknown_category_name(self):
        overrides = self.loader.parse({"categories": {"lava": FULL_ENTRY, "fire": FULL_ENTRY}})
        assert overrides.success_count == 1
        assert overrides.error_count == 1
        assert "lava" in overrides.errors[0]

    def test_more_errors_than_successes_warns(self, caplog):
        data = {"categories": {"lava": FULL_ENTRY, "magma": FULL_ENTRY, "fire": FULL_ENTRY}}
        with caplog.at_level(logging.WARNING, logger="texrecolor"):
            overrides = self.loader.parse(data)
        assert overrides.success_count == 1
        assert "More errors" in caplog.text

    def test_no_valid_entries_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="texrecolor"):
            overrides = self.loader.parse({"categories": {"lava": FULL_ENTRY}})
        assert overrides.is_empty
        assert "No valid palette entries" in caplog.text

    def test_missing_file_is_empty(self, tmp_path):
        overrides = self.loader.load(tmp_path / "missing.yaml")
        assert overrides.is_empty
        assert overrides.error_count == 0

    def test_unparseable_file_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("categories: [unclosed\n")
        with pytest.raises(PaletteConfigError):
            self.loader.load(path)

    def test_non_mapping_entries_raise(self):
        with pytest.raises(PaletteConfigError):
            self.loader.parse({"categories": ["fire"]})

    def test_json_file(self, tmp_path):
        path = tmp_path / "palettes.json"
        path.write_text(json.dumps({"categories": {"grass": FULL_ENTRY}}))
        assert Category.GRASS in self.loader.load(path).palettes

    def test_catalog_from_config(self, tmp_path):
        path = tmp_path / "palettes.yaml"
        path.write_text(yaml.safe_dump({"categories": {"ghost": FULL_ENTRY}}))
        catalog = PaletteCatalog.from_config(path)
        assert catalog.get_palette("ghost").light == Color(80, 96, 112)


class TestDefaultConfigExport:
    """Test writing the built-in palettes to a file."""

    def test_render_is_valid_yaml(self):
        data = yaml.safe_load(render_default_palette_config())
        assert data["config_info"]["version"] == "1.0"
        assert len(data["categories"]) == 18
        assert list(data["categories"]) == sorted(data["categories"])

    def test_round_trip_reproduces_defaults(self, tmp_path):
        path = write_default_palette_config(tmp_path / "palettes.yaml")
        overrides = PaletteConfigLoader().load(path)

        assert overrides.success_count == 18
        assert overrides.error_count == 0
        defaults = DefaultPalettes.create_palettes()
        targets = DefaultPalettes.create_hsv_targets()
        for category in Category:
            assert overrides.palettes[category] == defaults[category]
            loaded = overrides.hsv_targets[category]
            assert loaded.hue == pytest.approx(targets[category].hue)
            assert loaded.value == pytest.approx(targets[category].value)

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "palettes.yaml"
        path.write_text("keep me")
        with pytest.raises(FileExistsError):
            write_default_palette_config(path)
        assert path.read_text() == "keep me"

        write_default_palette_config(path, overwrite=True)
        assert "categories:" in path.read_text()
