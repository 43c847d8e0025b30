"""Image Extrude - Turn 2D images into extruded 3D solids.

Image Extrude converts SVG or bitmap images into a flat cross-section of a
target physical width, extrudes it to a solid, and packages the result as
GLB or 3MF.

Example:
    $ image-extrude logo.3mf --image logo.svg --height 2

This samples the SVG outlines, scales them to 50 mm wide, extrudes them 2 mm
and writes a 3MF archive.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
