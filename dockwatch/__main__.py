"""Run the Dockwatch agent: ``python -m dockwatch``."""

from dockwatch.main import run

run()
