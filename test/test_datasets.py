import json

import pytest

from cartoplot import datasets

# ========================================= <cartoplot.datasets> =========================================

"""
pooch.retrieve is replaced by a function writing the test topology, so no test downloads anything.
"""


@pytest.fixture
def fake_retrieve(topology, tmp_path, monkeypatch):
    calls = []

    def retrieve(url, known_hash, fname, path, downloader):
        calls.append((url, fname, path))
        target = tmp_path / fname
        target.write_text(json.dumps(topology))
        return str(target)

    monkeypatch.setattr(datasets, "_retrieve", retrieve)
    return calls


def test_available_datasets():
    names = datasets.available_datasets()
    assert "us-states" in names
    assert "world-countries" in names


def test_unknown_dataset():
    with pytest.raises(KeyError):
        datasets.fetch("moon-craters")


def test_cache_location(tmp_path, monkeypatch):
    monkeypatch.setenv(datasets.DATA_DIR_ENV, str(tmp_path))
    assert str(datasets.path_to_cache()) == str(tmp_path)


def test_fetch(fake_retrieve, tmp_path, monkeypatch):
    monkeypatch.setenv(datasets.DATA_DIR_ENV, str(tmp_path))
    path = datasets.fetch("world-countries")
    assert path.endswith("world-countries.topojson")
    url, fname, cache = fake_retrieve[0]
    assert url == "https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json"
    assert str(cache) == str(tmp_path)


def test_load_us_states(fake_retrieve, monkeypatch):
    monkeypatch.setitem(
        datasets._datasets,
        "us-states",
        ("https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json", "regions"),
    )
    states = datasets.load_us_states()
    assert list(states["name"]) == ["left", "right"]
    assert states.crs.to_epsg() == 4326


def test_load_world_countries(fake_retrieve, monkeypatch):
    monkeypatch.setitem(
        datasets._datasets,
        "world-countries",
        ("https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json", "cities"),
    )
    cities = datasets.load_world_countries()
    assert list(cities["name"]) == ["c", "m"]
    assert list(cities.geometry.geom_type) == ["Point", "MultiPoint"]


def test_clear_cache(tmp_path, monkeypatch):
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "us-states.topojson").write_text("{}")
    monkeypatch.setenv(datasets.DATA_DIR_ENV, str(cache))
    datasets.clear_cache()
    assert cache.is_dir()
    assert list(cache.iterdir()) == []
