import logging
from typing import Tuple

import numba as nb
import numpy as np
from scipy.ndimage import sobel

logger = logging.getLogger(__name__)

HEIGHT_FIRST = 'height-first'
WIDTH_FIRST = 'width-first'
VALID_ORDERS = (HEIGHT_FIRST, WIDTH_FIRST)

# A seam only runs through interior columns, so at least one column must
# lie strictly between the two borders.
MIN_CARVE_SIZE = 3


def _get_energy(src: np.ndarray) -> np.ndarray:
    """Get the energy map of the source image.

    Each channel contributes the absolute horizontal and vertical Sobel
    responses, i.e. the three neighbours on either side of the pixel weighted
    (1, 2, 1). Border pixels are not computed and carry zero energy.
    """
    assert src.ndim in (2, 3)
    planes = src.astype(np.float64)
    if planes.ndim == 2:
        planes = planes[:, :, np.newaxis]

    h, w, c = planes.shape
    energy = np.zeros((h, w), dtype=np.float64)
    for ch in range(c):
        plane = planes[:, :, ch]
        energy += np.abs(sobel(plane, axis=1)) + np.abs(sobel(plane, axis=0))

    energy[[0, -1], :] = 0
    energy[:, [0, -1]] = 0
    return energy


@nb.njit(cache=True)
def _get_cumulative_energy(energy: np.ndarray,
                           seed_first_row: bool = False) -> np.ndarray:
    """Compute the minimal cost to reach each interior pixel from the top.

    Only columns 1..w-2 are ever written. Both edge columns stay at zero,
    and so does row 0 unless seed_first_row is set, in which case its
    interior is copied from the energy map.
    """
    h, w = energy.shape
    lo = 1
    hi = w - 2
    cost = np.zeros((h, w), dtype=np.float64)

    if seed_first_row:
        for c in range(lo, hi + 1):
            cost[0, c] = energy[0, c]

    for r in range(1, h):
        for c in range(lo, hi + 1):
            left = max(lo, c - 1)
            right = min(hi, c + 1)
            best = cost[r - 1, left]
            for k in range(left + 1, right + 1):
                if cost[r - 1, k] < best:
                    best = cost[r - 1, k]
            cost[r, c] = energy[r, c] + best

    return cost


@nb.njit(cache=True)
def _get_seam(cost: np.ndarray) -> np.ndarray:
    """Backtrack the minimum vertical seam from the cumulative energy map"""
    h, w = cost.shape
    lo = 1
    hi = w - 2
    seam = np.empty(h, dtype=np.int32)

    # ties on the bottom row go to the rightmost column
    c = lo
    for i in range(lo, hi + 1):
        if cost[h - 1, i] <= cost[h - 1, c]:
            c = i
    seam[h - 1] = c

    # ties while walking up keep the seam in its current column
    for r in range(h - 2, -1, -1):
        up = cost[r, c]
        if c > lo and c < hi:
            left = cost[r, c - 1]
            right = cost[r, c + 1]
            if left < up and left <= right:
                c -= 1
            elif right < up:
                c += 1
        elif c < hi:
            if cost[r, c + 1] < up:
                c += 1
        elif c > lo:
            if cost[r, c - 1] < up:
                c -= 1
        seam[r] = c

    return seam


def _get_seam_mask(src: np.ndarray, seam: np.ndarray) -> np.ndarray:
    """Convert a list of seam column indices to a keep-mask"""
    return ~np.eye(src.shape[1], dtype=bool)[seam]


def _remove_seam(src: np.ndarray, seam: np.ndarray) -> np.ndarray:
    """Remove a seam from the source image, given a list of seam columns"""
    assert seam.shape == (src.shape[0],)
    seam_mask = _get_seam_mask(src, seam)
    if src.ndim == 3:
        h, w, c = src.shape
        seam_mask = np.dstack([seam_mask] * c)
        dst = src[seam_mask].reshape((h, w - 1, c))
    else:
        h, w = src.shape
        dst = src[seam_mask].reshape((h, w - 1))
    return dst


def _transpose(src: np.ndarray) -> np.ndarray:
    """Swap rows and columns, returning a fresh contiguous copy"""
    if src.ndim == 3:
        return np.ascontiguousarray(src.transpose((1, 0, 2)))
    return np.ascontiguousarray(src.T)


def remove_vertical_seam(src: np.ndarray,
                         seed_first_row: bool = False) -> np.ndarray:
    """Remove the vertical seam with the lowest energy.

    :param src: A source image of at least ``MIN_CARVE_SIZE`` columns.
    :param seed_first_row: Whether the cumulative energy of the top row is
        seeded from its energy instead of being left at zero.
    :return: A new image one column narrower than the source.
    """
    if src.shape[1] < MIN_CARVE_SIZE:
        raise ValueError('Invalid src of width {}: expected at least {} '
                         'columns'.format(src.shape[1], MIN_CARVE_SIZE))
    energy = _get_energy(src)
    cost = _get_cumulative_energy(energy, seed_first_row)
    seam = _get_seam(cost)
    return _remove_seam(src, seam)


def remove_horizontal_seam(src: np.ndarray,
                           seed_first_row: bool = False) -> np.ndarray:
    """Remove the horizontal seam with the lowest energy.

    The image is transposed, carved vertically and transposed back.
    """
    dst = remove_vertical_seam(_transpose(src), seed_first_row)
    return _transpose(dst)


def _check_src(src: np.ndarray) -> np.ndarray:
    """Ensure the source to be a multi-channel or grayscale image"""
    src = np.asarray(src)
    if src.size == 0 or src.ndim not in (2, 3):
        raise ValueError('Invalid src of shape {}: expected a 3D multi-channel '
                         'image or a 2D grayscale image'.format(src.shape))
    return src


def _check_size(size: Tuple[int, int], src_size: Tuple[int, int]
                ) -> Tuple[int, int]:
    """Ensure the target size can be reached by removing seams only"""
    width, height = size
    src_w, src_h = src_size
    width = int(round(width))
    height = int(round(height))

    if width <= 0 or height <= 0:
        raise ValueError('Invalid size {}: expected > 0'.format(size))
    if width > src_w:
        raise ValueError('Invalid target width {}: expected no more than the '
                         'source width ({})'.format(width, src_w))
    if height > src_h:
        raise ValueError('Invalid target height {}: expected no more than the '
                         'source height ({})'.format(height, src_h))
    if width < src_w and width < MIN_CARVE_SIZE - 1:
        raise ValueError('Invalid target width {}: carving needs at least {} '
                         'columns left'.format(width, MIN_CARVE_SIZE - 1))
    if height < src_h and height < MIN_CARVE_SIZE - 1:
        raise ValueError('Invalid target height {}: carving needs at least {} '
                         'rows left'.format(height, MIN_CARVE_SIZE - 1))
    return width, height


def resize(src: np.ndarray, size: Tuple[int, int],
           order: str = HEIGHT_FIRST,
           seed_first_row: bool = False) -> np.ndarray:
    """Shrink the image using the content-aware seam-carving algorithm.

    Vertical and horizontal seams are removed alternately until one axis
    reaches its target, then the remaining axis is carved alone. Every seam
    is the cheapest one at the moment it is removed; the set as a whole is
    not jointly optimal.

    :param src: A source image of shape ``(h, w)`` or ``(h, w, c)``.
    :param size: The target size in pixels, as a 2-tuple (width, height).
        Neither side may exceed the source, enlargement is not supported.
    :param order: Which seam opens each alternating round. In
        ``height-first`` mode a horizontal seam is removed before each
        vertical one, while ``width-first`` is the opposite.
    :param seed_first_row: If set, the top row of the cumulative energy is
        seeded from the energy map. By default it is left at zero, which
        makes the top row free and lets the seam run straight up from row 1.
    :return: A resized copy of the source image.
    """
    src = _check_src(src)
    src_h, src_w = src.shape[:2]

    if order not in VALID_ORDERS:
        raise ValueError('Invalid order {}: expected {}'.format(
            order, VALID_ORDERS))

    width, height = _check_size(size, (src_w, src_h))

    seams_x = src_w - width
    seams_y = src_h - height
    logger.info('Removing %d vertical and %d horizontal seams from %dx%d',
                seams_x, seams_y, src_w, src_h)

    if order == HEIGHT_FIRST:
        steps = (remove_horizontal_seam, remove_vertical_seam)
    else:
        steps = (remove_vertical_seam, remove_horizontal_seam)

    dst = np.array(src)
    for _ in range(min(seams_x, seams_y)):
        for step in steps:
            dst = step(dst, seed_first_row)
        seams_x -= 1
        seams_y -= 1
        logger.debug('Carved one seam per axis, now %dx%d',
                     dst.shape[1], dst.shape[0])

    for _ in range(seams_x):
        dst = remove_vertical_seam(dst, seed_first_row)
        logger.debug('Carved vertical seam, now %dx%d',
                     dst.shape[1], dst.shape[0])

    for _ in range(seams_y):
        dst = remove_horizontal_seam(dst, seed_first_row)
        logger.debug('Carved horizontal seam, now %dx%d',
                     dst.shape[1], dst.shape[0])

    return dst
