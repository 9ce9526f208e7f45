"""
The VIEW layer: the PySide6 window and the PyVista viewport.
"""
