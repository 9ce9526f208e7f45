"""
Fractal Boxes
=============
An interactive editor that places boxes in 3D space and composes their
transforms with themselves into a self-similar fractal.
"""
