import pytest

## ==========================

def test_numpy_import():
    import numpy
    return

def test_scipy_import():
    import scipy
    print("\t\t You have scipy version {}".format(scipy.__version__))


def test_cartopy_import():
    import cartopy


def test_plotly_import():
    import plotly
    print("\t\t You have plotly version {}".format(plotly.__version__))


def test_geopandas_import():
    import geopandas
    import mapclassify


def test_pooch_import():
    import pooch


def test_cartoplot_modules():
    import cartoplot
    from cartoplot import plot
    from cartoplot import basemaps
    from cartoplot import cartogram
    from cartoplot import datasets
    from cartoplot import projections
    from cartoplot import topojson


def test_cartoplot_version():
    import cartoplot

    assert isinstance(cartoplot.__version__, str)
    for name in cartoplot.__all__:
        assert hasattr(cartoplot, name), "cartoplot.{} is listed in __all__ but missing".format(name)
