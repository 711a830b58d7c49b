"""UI-Komponenten für Clive (Menübar, Chart-Rendering).

macOS: MenuBarController
Plattformunabhängig: ui.render (Farbstufen, Titel, Geometrie)
"""

import sys

__all__ = []

if sys.platform == "darwin":
    from .menubar import MenuBarController

    __all__ = ["MenuBarController"]
