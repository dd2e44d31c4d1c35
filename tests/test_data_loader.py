import json
from pathlib import Path

import pytest
import requests

import data_loader
from constants import DEFAULT_CONFIG
from data_loader import (
    build_boundaries,
    feature_name,
    load_app_config,
    load_boundaries,
    normalize_name,
)

BUNDLED_BOUNDARIES = Path(__file__).parent.parent / "data" / "toronto_crs84.geojson"


class TestNormalizeName:
    def test_accent_insensitive(self):
        assert normalize_name("Côte-des-Neiges") == normalize_name("cote-des-neiges")

    def test_idempotent(self):
        once = normalize_name("  Île Sainte-Hélène ")
        assert once == "ile sainte-helene"
        assert normalize_name(once) == once

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert normalize_name(value) == ""

    def test_non_string(self):
        assert normalize_name(42) == "42"


class TestFeatureName:
    def test_key_priority(self):
        feature = {"properties": {"WARD": "Ward 10", "AREA_NAME": "Kensington Market", "name": ""}}
        assert feature_name(feature) == "Kensington Market"

    def test_lowercase_name_first(self):
        assert feature_name({"properties": {"NAME": "B", "name": "A"}}) == "A"

    def test_fallback_uses_feature_id(self):
        assert feature_name({"id": 7, "properties": {"OTHER": "x"}}) == "Area 7"

    def test_fallback_without_id(self):
        assert feature_name({"properties": None}) == "Area"


class TestBoundaryCollection:
    def test_indices_and_names(self, hoods):
        assert len(hoods) == 3
        assert hoods.names == ["Kensington Market", "Côte-des-Neiges", "The Annex"]
        assert hoods.name_index == [
            (0, "kensington market"),
            (1, "cote-des-neiges"),
            (2, "the annex"),
        ]

    def test_lookup_keeps_first_duplicate(self, hoods_geojson):
        hoods_geojson["features"][2]["properties"] = {"name": "kensington market"}
        collection = build_boundaries(hoods_geojson)
        assert collection.lookup["kensington market"] == 0

    def test_skips_features_without_polygons(self, hoods_geojson):
        hoods_geojson["features"].insert(1, {"type": "Feature", "properties": {"name": "Pt"},
                                             "geometry": {"type": "Point", "coordinates": [0, 0]}})
        hoods_geojson["features"].append({"type": "Feature", "properties": {"name": "None"}, "geometry": None})
        collection = build_boundaries(hoods_geojson)
        assert collection.names == ["Kensington Market", "Côte-des-Neiges", "The Annex"]
        assert [b.index for b in collection] == [0, 1, 2]

    def test_single_feature(self, hoods_geojson):
        collection = build_boundaries(hoods_geojson["features"][0])
        assert collection.names == ["Kensington Market"]

    def test_padded_bounds(self, hoods):
        (south, west), (north, east) = hoods.bounds(0, pad=0.1)
        assert south == pytest.approx(43.649)
        assert north == pytest.approx(43.661)
        assert west == pytest.approx(-79.411)
        assert east == pytest.approx(-79.399)

    def test_geometries_subset(self, hoods):
        assert len(hoods.geometries()) == 3
        assert len(hoods.geometries({2, 99})) == 1

    def test_geojson_marks_selection(self, hoods):
        fc = hoods.to_geojson(frozenset({1}))
        flags = [f["properties"]["selected"] for f in fc["features"]]
        assert flags == [False, True, False]
        assert fc["features"][1]["properties"]["line_width"] == 3
        assert fc["features"][0]["properties"]["display_name"] == "Kensington Market"
        assert fc["features"][0]["properties"]["_idx"] == 0


class TestLoadBoundaries:
    def test_loads_file(self, tmp_path, hoods_geojson):
        path = tmp_path / "hoods.geojson"
        path.write_text(json.dumps(hoods_geojson), encoding="utf-8")
        collection = load_boundaries(path)
        assert collection is not None
        assert len(collection) == 3

    def test_bundled_file_loads(self):
        collection = load_boundaries(BUNDLED_BOUNDARIES)
        assert collection is not None
        assert "kensington market" in collection.lookup

    def test_missing_file(self, tmp_path):
        assert load_boundaries(tmp_path / "nope.geojson") is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.geojson"
        path.write_text("{not json", encoding="utf-8")
        assert load_boundaries(path) is None

    def test_not_geojson(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert load_boundaries(path) is None

    def test_no_features(self, tmp_path):
        path = tmp_path / "empty.geojson"
        path.write_text('{"type": "FeatureCollection", "features": []}', encoding="utf-8")
        assert load_boundaries(path) is None

    def test_url_source(self, monkeypatch, hoods_geojson):
        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return hoods_geojson

        calls = []

        def fake_get(url, **kwargs):
            calls.append(url)
            return FakeResponse()

        monkeypatch.setattr(data_loader.requests, "get", fake_get)
        collection = load_boundaries("https://example.org/hoods.geojson")
        assert calls == ["https://example.org/hoods.geojson"]
        assert len(collection) == 3

    def test_url_failure(self, monkeypatch):
        def fake_get(url, **kwargs):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(data_loader.requests, "get", fake_get)
        assert load_boundaries("https://example.org/hoods.geojson") is None


class TestLoadAppConfig:
    @pytest.fixture(autouse=True)
    def clear_env(self, monkeypatch):
        for name in data_loader.ENV_OVERRIDES:
            monkeypatch.delenv(name, raising=False)

    def test_defaults_without_file(self, tmp_path):
        assert load_app_config(tmp_path / "missing.json") == DEFAULT_CONFIG

    def test_file_overrides_known_keys(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"seed": 1, "clip_to_boundaries": False, "unknown": 1}), encoding="utf-8")
        cfg = load_app_config(path)
        assert cfg["seed"] == 1
        assert cfg["clip_to_boundaries"] is False
        assert "unknown" not in cfg
        assert cfg["target_count"] == DEFAULT_CONFIG["target_count"]

    def test_bad_file_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("oops", encoding="utf-8")
        assert load_app_config(path) == DEFAULT_CONFIG

    def test_env_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NOMINATIM_USER_AGENT", "test-agent/0.1")
        monkeypatch.setenv("POTHOLE_BOUNDARY_SOURCE", "elsewhere.geojson")
        cfg = load_app_config(tmp_path / "missing.json")
        assert cfg["geocoder_user_agent"] == "test-agent/0.1"
        assert cfg["boundary_source"] == "elsewhere.geojson"
