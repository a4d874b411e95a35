"""Views module - Explorer-ready subgraphs and export formats."""

from .trail_view import LayoutHint, TrailQuery, TrailView, TrailViewBuilder

__all__ = [
    "LayoutHint",
    "TrailQuery",
    "TrailView",
    "TrailViewBuilder",
]
