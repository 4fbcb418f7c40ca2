"""Layout Builder UI package.

Toolkit-free controllers that renderers (pointer drag, keyboard, tests)
drive through plain callbacks.
"""

from . import controllers as _controllers  # noqa: F401

from .controllers.layout_controller import LayoutController  # noqa: F401

__all__: list[str] = [
    "LayoutController",
]
