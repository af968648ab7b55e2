"""
Tests — GML Feature Reader
===========================
Unit tests for :mod:`src.hk80_geojson.gml_reader`.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from shared.python.exceptions import GmlParseError, InputValidationError
from src.hk80_geojson import gml_reader
from src.hk80_geojson.gml_reader import iter_features, local_name, parse_pos_list
from gml_samples import city_object


class TestParsePosList:
    def test_two_dimensional(self) -> None:
        result = parse_pos_list("836000 819000 836100 819050")
        np.testing.assert_array_equal(result, [[836000, 819000], [836100, 819050]])

    def test_three_dimensional_drops_height(self) -> None:
        result = parse_pos_list("1 2 30 4 5 60", dimension=3)
        np.testing.assert_array_equal(result, [[1, 2], [4, 5]])

    def test_trailing_ordinate_ignored(self) -> None:
        assert parse_pos_list("1 2 3").shape == (1, 2)

    def test_non_numeric_tokens_dropped(self) -> None:
        result = parse_pos_list("1 2 oops 3 4")
        np.testing.assert_array_equal(result, [[1, 2], [3, 4]])

    @pytest.mark.parametrize("text", [None, "", "   \n "])
    def test_empty(self, text: str | None) -> None:
        assert parse_pos_list(text).shape == (0, 2)


class TestIterFeatures:
    def test_reads_typed_attributes(self, tmp_path: Path, write_gml) -> None:
        path = write_gml(
            tmp_path / "CENTERLINE.gml",
            [
                city_object(
                    [
                        ("string", "ROUTE_ID", "R1"),
                        ("int", "LANES", "2"),
                        ("double", "LENGTH", "12.5"),
                    ],
                    ["836000 819000 836100 819050"],
                )
            ],
        )
        (feature,) = list(iter_features(path))
        assert feature.properties == {"ROUTE_ID": "R1", "LANES": 2, "LENGTH": 12.5}
        assert feature.vertices == [(836000.0, 819000.0), (836100.0, 819050.0)]

    def test_unparseable_numbers_omitted(self, tmp_path: Path, write_gml) -> None:
        path = write_gml(
            tmp_path / "a.gml",
            [city_object([("int", "LANES", "two"), ("double", "LENGTH", "n/a")], [])],
        )
        (feature,) = list(iter_features(path))
        assert feature.properties == {}
        assert feature.vertices == []

    def test_multiple_pos_lists_concatenated_in_order(self, tmp_path: Path, write_gml) -> None:
        path = write_gml(
            tmp_path / "a.gml",
            [city_object([], ["1 2 3 4", "3|5 6 0 7 8 0"])],
        )
        (feature,) = list(iter_features(path))
        assert feature.vertices == [(1.0, 2.0), (3.0, 4.0), (5.0, 6.0), (7.0, 8.0)]

    def test_features_in_document_order(self, input_dir: Path) -> None:
        ids = [f.properties["ROUTE_ID"] for f in iter_features(input_dir / "CENTERLINE.gml")]
        assert ids == ["R1", "R2"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InputValidationError):
            list(iter_features(tmp_path / "nope.gml"))

    def test_malformed_xml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.gml"
        path.write_text("<core:CityModel><gen:GenericCityObject>", encoding="utf-8")
        with pytest.raises(GmlParseError, match="broken.gml"):
            list(iter_features(path))

    @pytest.mark.parametrize("dimension", ["x", "2.5", "1", "0"])
    def test_invalid_srs_dimension(self, tmp_path: Path, write_gml, dimension: str) -> None:
        path = write_gml(
            tmp_path / "dims.gml",
            [city_object([("string", "ROUTE_ID", "R1")], [f"{dimension}|836000 819000"])],
        )
        with pytest.raises(GmlParseError, match="dims.gml.*srsDimension"):
            list(iter_features(path))

    def test_processed_members_released(self, tmp_path: Path, write_gml, monkeypatch) -> None:
        path = write_gml(
            tmp_path / "many.gml",
            [city_object([("int", "ROUTE_ID", str(i))], ["1 2 3 4"]) for i in range(5)],
        )
        contexts = []
        real_iterparse = gml_reader.ET.iterparse

        def recording_iterparse(*args, **kwargs):
            context = real_iterparse(*args, **kwargs)
            contexts.append(context)
            return context

        monkeypatch.setattr(gml_reader.ET, "iterparse", recording_iterparse)

        assert [f.properties["ROUTE_ID"] for f in iter_features(path)] == [0, 1, 2, 3, 4]
        (context,) = contexts
        assert context.root is not None
        assert len(context.root) == 0


def test_local_name() -> None:
    assert local_name("{http://www.opengis.net/gml}posList") == "posList"
    assert local_name("posList") == "posList"
