"""
Tests — Conversion Pipeline
============================
Unit tests for :class:`~src.hk80_geojson.converter.GmlToGeoJsonConverter`
and the GeoJSON writer helpers it uses.

Test strategy:
- Build minimal GML layers in ``tmp_path`` fixtures.
- Assert one file per feature, named by id, with WGS84 coordinates.
- Assert that validation errors and domain errors are handled per config.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from shared.python.exceptions import InputValidationError, OutOfDomainError, OutputWriteError
from src.hk80_geojson.converter import ConverterConfig, GmlToGeoJsonConverter, LayerSpec
from src.hk80_geojson.geojson_writer import build_feature, feature_filename, write_feature
from src.hk80_geojson.transformer import transform_sequence
from gml_samples import city_object


def _load(path: Path) -> dict:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


# ---------------------------------------------------------------------------
# Writer helpers
# ---------------------------------------------------------------------------


class TestGeoJsonWriter:
    def test_build_feature(self) -> None:
        feature = build_feature({"ROUTE_ID": "R1"}, [(114.1, 22.3), (114.2, 22.4)])
        assert feature == {
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": [[114.1, 22.3], [114.2, 22.4]]},
            "properties": {"ROUTE_ID": "R1"},
        }

    @pytest.mark.parametrize(
        "properties, expected",
        [
            ({"ROUTE_ID": "R1"}, "R1.json"),
            ({"ROUTE_ID": 42}, "42.json"),
            ({"ROUTE_ID": "A/B"}, "A_B.json"),
            ({"ROUTE_ID": 1.5}, "object_3.json"),
            ({"ROUTE_ID": ""}, "object_3.json"),
            ({"ROUTE_ID": ".."}, "object_3.json"),
            ({}, "object_3.json"),
        ],
    )
    def test_feature_filename(self, properties: dict, expected: str) -> None:
        assert feature_filename(properties, "ROUTE_ID", 3) == expected

    def test_write_feature_pretty_printed(self, tmp_path: Path) -> None:
        path = tmp_path / "R1.json"
        write_feature(path, build_feature({"NAME": "皇后大道"}, [(114.1, 22.3)]))
        text = path.read_text(encoding="utf-8")
        assert text.startswith('{\n  "type": "Feature"')
        assert _load(path)["properties"]["NAME"] == "皇后大道"

    def test_write_feature_failure(self, tmp_path: Path) -> None:
        with pytest.raises(OutputWriteError):
            write_feature(tmp_path / "missing_dir" / "R1.json", build_feature({}, []))


# ---------------------------------------------------------------------------
# Happy-path tests
# ---------------------------------------------------------------------------


class TestConverterHappyPath:
    def test_one_file_per_feature(self, tmp_path: Path, input_dir: Path) -> None:
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output).run()

        assert sorted(p.name for p in (output / "centerlines").iterdir()) == ["R1.json", "R2.json"]
        assert [p.name for p in (output / "pedestrian_zones").iterdir()] == ["7.json"]

    def test_feature_content(self, tmp_path: Path, input_dir: Path) -> None:
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output).run()

        feature = _load(output / "centerlines" / "R1.json")
        assert feature["type"] == "Feature"
        assert feature["properties"] == {"ROUTE_ID": "R1", "LANES": 2}
        assert feature["geometry"]["type"] == "LineString"

        expected = transform_sequence(
            [(836000.0, 819000.0), (836100.0, 819050.0), (836200.0, 819120.0)]
        )
        assert feature["geometry"]["coordinates"] == [list(p) for p in expected]

    def test_coordinates_are_wgs84_lon_lat(self, tmp_path: Path, input_dir: Path) -> None:
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output).run()

        for lon, lat in _load(output / "pedestrian_zones" / "7.json")["geometry"]["coordinates"]:
            assert 113.8 < lon < 114.5
            assert 22.1 < lat < 22.6

    def test_result_object_populated(self, tmp_path: Path, input_dir: Path) -> None:
        tool = GmlToGeoJsonConverter(input_dir, tmp_path / "output")
        assert tool.result is None  # not yet run
        tool.run()
        assert tool.result is not None
        assert tool.result.features_written == 3
        assert tool.result.features_skipped == 0
        assert tool.result.vertices_written == 7
        assert "Wrote 3 feature(s)" in tool.result.summary()
        assert tool.elapsed is not None and tool.elapsed >= 0

    def test_missing_layer_skipped(self, tmp_path: Path, input_dir: Path) -> None:
        (input_dir / "PEDESTRIAN_ZONE.gml").unlink()
        output = tmp_path / "output"
        tool = GmlToGeoJsonConverter(input_dir, output)
        tool.run()

        assert tool.result is not None
        found = {r.layer.output_subdir: r.found for r in tool.result.layers}
        assert found == {"centerlines": True, "pedestrian_zones": False}
        assert (output / "pedestrian_zones").is_dir()
        assert list((output / "pedestrian_zones").iterdir()) == []

    def test_feature_without_id_not_written(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        write_gml(
            input_dir / "CENTERLINE.gml",
            [
                city_object([("string", "ROUTE_ID", "R1")], ["836000 819000 836100 819050"]),
                city_object([("string", "OTHER", "x")], ["836000 819000 836100 819050"]),
            ],
        )
        output = tmp_path / "output"
        tool = GmlToGeoJsonConverter(input_dir, output)
        tool.run()

        assert [p.name for p in (output / "centerlines").iterdir()] == ["R1.json"]
        assert tool.result is not None
        assert tool.result.features_written == 1
        assert tool.result.features_without_id == 1
        assert "1 without id" in tool.result.summary()

    def test_non_text_id_uses_index(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        write_gml(
            input_dir / "CENTERLINE.gml",
            [
                city_object([("string", "ROUTE_ID", "R1")], ["836000 819000 836100 819050"]),
                city_object([("double", "ROUTE_ID", "4.5")], ["836000 819000 836100 819050"]),
            ],
        )
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output).run()
        assert sorted(p.name for p in (output / "centerlines").iterdir()) == ["R1.json", "object_1.json"]

    def test_duplicate_ids_kept_apart(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        write_gml(
            input_dir / "CENTERLINE.gml",
            [
                city_object([("string", "ROUTE_ID", "R1")], ["836000 819000 836100 819050"]),
                city_object([("string", "ROUTE_ID", "R1")], ["835000 818000 835100 818100"]),
            ],
        )
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output).run()
        assert sorted(p.name for p in (output / "centerlines").iterdir()) == ["R1.json", "R1_1.json"]

    def test_renamed_duplicate_never_overwrites(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        write_gml(
            input_dir / "CENTERLINE.gml",
            [
                city_object([("string", "ROUTE_ID", "R1_2")], ["836000 819000 836100 819050"]),
                city_object([("string", "ROUTE_ID", "R1")], ["835000 818000 835100 818100"]),
                city_object([("string", "ROUTE_ID", "R1")], ["834000 817000 834100 817100"]),
            ],
        )
        output = tmp_path / "output"
        tool = GmlToGeoJsonConverter(input_dir, output)
        tool.run()

        names = sorted(p.name for p in (output / "centerlines").iterdir())
        assert names == ["R1.json", "R1_2.json", "R1_2_1.json"]
        assert tool.result is not None
        assert tool.result.features_written == len(names)
        assert _load(output / "centerlines" / "R1_2.json")["properties"]["ROUTE_ID"] == "R1_2"

    def test_many_features_single_worker(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        objects = [
            city_object([("int", "ROUTE_ID", str(i))], [f"{836000 + i} 819000 {836100 + i} 819050"])
            for i in range(25)
        ]
        write_gml(input_dir / "CENTERLINE.gml", objects)
        config = ConverterConfig(max_workers=1, progress_every=10)
        tool = GmlToGeoJsonConverter(input_dir, tmp_path / "output", config)
        tool.run()
        assert tool.result is not None
        assert tool.result.features_written == 25

    def test_custom_layers(self, tmp_path: Path, write_gml) -> None:
        input_dir = tmp_path / "input"
        write_gml(
            input_dir / "ROADS.gml",
            [city_object([("string", "RID", "A1")], ["836000 819000 836100 819050"])],
        )
        config = ConverterConfig(layers=(LayerSpec("ROADS.gml", "RID", "roads"),))
        output = tmp_path / "output"
        GmlToGeoJsonConverter(input_dir, output, config).run()
        assert (output / "roads" / "A1.json").is_file()


# ---------------------------------------------------------------------------
# Domain error policy
# ---------------------------------------------------------------------------


@pytest.fixture()
def input_with_bad_feature(tmp_path: Path, write_gml) -> Path:
    input_dir = tmp_path / "input"
    write_gml(
        input_dir / "CENTERLINE.gml",
        [
            city_object([("string", "ROUTE_ID", "GOOD")], ["836000 819000 836100 819050"]),
            city_object([("string", "ROUTE_ID", "BAD")], ["836000 819000 1e15 819050"]),
        ],
    )
    return input_dir


class TestDomainErrorPolicy:
    def test_skip(self, tmp_path: Path, input_with_bad_feature: Path) -> None:
        output = tmp_path / "output"
        tool = GmlToGeoJsonConverter(input_with_bad_feature, output)
        tool.run()

        assert tool.result is not None
        assert tool.result.features_written == 1
        assert tool.result.features_skipped == 1
        assert [p.name for p in (output / "centerlines").iterdir()] == ["GOOD.json"]

    def test_abort(self, tmp_path: Path, input_with_bad_feature: Path) -> None:
        config = ConverterConfig(on_domain_error="abort")
        tool = GmlToGeoJsonConverter(input_with_bad_feature, tmp_path / "output", config)
        with pytest.raises(OutOfDomainError):
            tool.run()
        assert tool.result is None


# ---------------------------------------------------------------------------
# Validation error tests
# ---------------------------------------------------------------------------


class TestConverterValidation:
    def test_missing_input_dir_raises(self, tmp_path: Path) -> None:
        tool = GmlToGeoJsonConverter(tmp_path / "does_not_exist", tmp_path / "out")
        with pytest.raises(InputValidationError):
            tool.run()

    def test_input_is_file_raises(self, tmp_path: Path) -> None:
        file_path = tmp_path / "input.gml"
        file_path.write_text("<x/>", encoding="utf-8")
        with pytest.raises(InputValidationError):
            GmlToGeoJsonConverter(file_path, tmp_path / "out").run()

    def test_output_is_file_raises(self, tmp_path: Path, input_dir: Path) -> None:
        blocker = tmp_path / "out"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(OutputWriteError):
            GmlToGeoJsonConverter(input_dir, blocker).run()

    @pytest.mark.parametrize(
        "config",
        [
            ConverterConfig(max_workers=0),
            ConverterConfig(progress_every=0),
            ConverterConfig(on_domain_error="ignore"),  # type: ignore[arg-type]
        ],
    )
    def test_bad_config_raises(self, tmp_path: Path, input_dir: Path, config: ConverterConfig) -> None:
        with pytest.raises(InputValidationError):
            GmlToGeoJsonConverter(input_dir, tmp_path / "out", config).run()
