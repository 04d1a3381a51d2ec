# axisbrowser/split/__init__.py

from .router import Pane, PaneSide, PaneState, SplitViewRouter, clamp_split_ratio

__all__ = ["Pane", "PaneSide", "PaneState", "SplitViewRouter", "clamp_split_ratio"]
