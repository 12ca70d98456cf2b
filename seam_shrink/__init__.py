from seam_shrink.carve import (
    HEIGHT_FIRST,
    WIDTH_FIRST,
    remove_horizontal_seam,
    remove_vertical_seam,
    resize,
)

__version__ = "0.1.0"
