"""
Visualization package for the HPV expression pipeline.
"""

from .plot_generator import PlotGenerator

__all__ = ["PlotGenerator"]
