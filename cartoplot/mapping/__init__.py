# This submodule contains code to plot maps.
# The folder is named "mapping" to avoid name conflicts with the "plot" submodule.
# The PlotEngine abstract base class is defined in plot_engine.py.
# There are different PlotEngine subclasses, CartopyPlotEngine and PlotlyPlotEngine, for different plotting libraries,
# such as Cartopy (static maps) and plotly (interactive maps).
