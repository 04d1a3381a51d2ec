# axisbrowser/views/__init__.py
"""
Page-rendering views.

Only the engine-independent contract is exported here; the WebKit
implementation lives in ``axisbrowser.views.webkit`` and needs PyGObject.
"""

from .contract import LOAD_ERROR_ABORTED, ViewEvent, ViewFactory, ViewHandle, ViewSignals

__all__ = ["LOAD_ERROR_ABORTED", "ViewEvent", "ViewFactory", "ViewHandle", "ViewSignals"]
