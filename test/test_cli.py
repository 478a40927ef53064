import json

import geopandas as gpd
import pytest

from cartoplot import __version__
from cartoplot.__main__ import build_parser, main

# ========================================= <cartoplot command line> =========================================


@pytest.fixture
def topojson_file(topology, tmp_path):
    path = tmp_path / "atlas.json"
    path.write_text(json.dumps(topology))
    return str(path)


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        main(["-v"])
    assert e.value.code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_no_arguments():
    with pytest.raises(SystemExit) as e:
        main([])
    assert e.value.code == 1


def test_parser_defaults():
    args = build_parser().parse_args(["render", "in.gpkg", "out.png"])
    assert args.engine == "cartopy"
    assert args.projection is None
    assert args.cmap == "viridis"
    assert args.func.__name__ == "run_render"

    args = build_parser().parse_args(["cartogram", "in.gpkg", "out.gpkg", "-w", "pop"])
    assert args.method == "cont"
    assert args.weight == "pop"


def test_list_names(capsys):
    main(["projections"])
    assert "robinson" in capsys.readouterr().out
    main(["basemaps"])
    assert "carto-positron" in capsys.readouterr().out


def test_topojson_conversion(topojson_file, tmp_path, capsys):
    main(["topojson", topojson_file, "--list"])
    out = capsys.readouterr().out
    assert "regions" in out and "cities" in out

    output = tmp_path / "regions.geojson"
    main(["topojson", topojson_file, str(output), "--object", "regions"])
    gdf = gpd.read_file(output)
    assert list(gdf["name"]) == ["left", "right"]

    with pytest.raises(ValueError):
        main(["topojson", topojson_file])


def test_render_static(topojson_file, tmp_path):
    output = tmp_path / "regions.png"
    main(
        [
            "render",
            topojson_file,
            str(output),
            "--object",
            "regions",
            "--color",
            "pop",
            "--projection",
            "mercator",
        ]
    )
    assert output.stat().st_size > 0


def test_render_interactive(topojson_file, tmp_path):
    output = tmp_path / "regions.html"
    main(
        [
            "render",
            topojson_file,
            str(output),
            "--engine",
            "plotly",
            "--object",
            "regions",
            "--split",
            "name",
        ]
    )
    assert "plotly" in output.read_text()


def test_render_points_csv(points_table, tmp_path):
    table = tmp_path / "quakes.csv"
    points_table.to_csv(table, index=False)
    output = tmp_path / "quakes.html"
    main(["render", str(table), str(output), "--engine", "plotly", "--color", "kind"])
    assert output.exists()


def test_render_format_mismatch(topojson_file, tmp_path):
    with pytest.raises(ValueError):
        main(["render", topojson_file, str(tmp_path / "map.html"), "--object", "regions"])
    with pytest.raises(ValueError):
        main(
            [
                "render",
                topojson_file,
                str(tmp_path / "map.png"),
                "--engine",
                "plotly",
                "--object",
                "regions",
            ]
        )


def test_cartogram_command(projected_squares, tmp_path):
    source = tmp_path / "squares.gpkg"
    projected_squares.to_file(source)
    output = tmp_path / "cartogram.gpkg"
    main(
        [
            "cartogram",
            str(source),
            str(output),
            "--weight",
            "weight",
            "--method",
            "ncont",
            "-k",
            "1",
        ]
    )
    result = gpd.read_file(output)
    assert result.crs.to_epsg() == 3857
    assert result.geometry.area.iloc[0] == pytest.approx(1e6 / 3)
