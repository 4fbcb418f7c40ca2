"""UI controllers package for Layout Builder.

Controllers mediate between renderers and the editing services; they hold
transient view state and never import a UI toolkit.
"""

from .layout_controller import LayoutController

__all__: list[str] = ["LayoutController"]
