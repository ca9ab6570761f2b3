"""Console rendering components."""

from dbc_decode.visualization.console import ConsoleVisualizer

__all__ = ["ConsoleVisualizer"]
