from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

PathLike = Union[str, Path]

OUTPUT_FORMAT = 'PNG'

# Pillow modes holding more than 8 bits per sample, which convert('RGBA')
# clips instead of scaling.
WIDE_MODES = ('I', 'I;16', 'I;16L', 'I;16B', 'I;16N')


def load_image(path: PathLike) -> np.ndarray:
    """Decode an image file into an RGBA array of shape (h, w, 4).

    The format is detected from the file content, not its extension.
    16-bit samples keep their high byte.
    """
    with Image.open(path) as img:
        if img.mode in WIDE_MODES:
            plane = np.clip(np.array(img), 0, 0xFFFF).astype(np.uint32) >> 8
            img = Image.fromarray(plane.astype(np.uint8))
        return np.array(img.convert('RGBA'))


def save_image(img: np.ndarray, path: PathLike) -> None:
    """Encode the image as PNG, whatever the extension of the path.

    The destination is only touched once encoding has succeeded.
    """
    buf = BytesIO()
    Image.fromarray(np.ascontiguousarray(img)).save(buf, format=OUTPUT_FORMAT)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(buf.getvalue())
