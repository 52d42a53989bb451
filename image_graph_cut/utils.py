from enum import IntEnum
from typing import Iterable, Tuple

import numpy as np

from image_graph_cut.errors import InvalidSeedSet

FOREGROUND = (0, 0, 255)  # blue
BACKGROUND = (255, 0, 0)  # red
FOREGROUND_RGBA = FOREGROUND + (255,)
BACKGROUND_RGBA = BACKGROUND + (255,)


class Label(IntEnum):
    BACKGROUND = 0
    FOREGROUND = 1


def as_coordinates(pixels: Iterable[Tuple[int, int]]) -> np.ndarray:
    """
    :param pixels: iterable of (x, y) pixel coordinates, or an array of shape (n, 2)
    :return: integer array of shape (n, 2)
    """
    if not isinstance(pixels, np.ndarray):
        pixels = list(pixels)
    coords = np.asarray(pixels)
    if coords.size == 0:
        return coords.astype(np.int64).reshape(0, 2)

    if not np.issubdtype(coords.dtype, np.integer):
        try:
            values = coords.astype(np.float64)
        except (TypeError, ValueError):
            raise InvalidSeedSet("Seed coordinates must be integers, got %r" % (pixels,))
        if not np.all(np.isfinite(values)) or np.any(values != np.round(values)):
            raise InvalidSeedSet("Seed coordinates must be integers, got %s" % (
                values.ravel()[:20].tolist(),))
    return coords.astype(np.int64).reshape(-1, 2)


def find_scribbles(scribble_img, color):
    """
    :param scribble_img: numpy array of shape (w, h, 3) with black everywhere and blue/red where scribbles
    :param color: scribble color to look for
    :return: a numpy array with the (x, y) location of the scribbled pixels of that color
    """
    xy = np.where(np.all(scribble_img[:, :, :3] == color, axis=-1))
    return np.array(xy).T


def seeds_from_scribbles(scribble_img):
    """
    Splits a scribble layer drawn with FOREGROUND / BACKGROUND colors into two seed sets.
    :param scribble_img: numpy array of shape (w, h, 3), pygame surfarray layout
    :return: foreground seeds and background seeds, as (x, y) arrays
    """
    return find_scribbles(scribble_img, FOREGROUND), find_scribbles(scribble_img, BACKGROUND)


def labels_to_rgb(labels: np.ndarray) -> np.ndarray:
    """
    :param labels: label map of shape (rows, cols)
    :return: image of shape (rows, cols, 3), foreground in blue and background in red
    """
    is_fg = labels == Label.FOREGROUND
    img = np.where(is_fg[:, :, np.newaxis], np.array(FOREGROUND), np.array(BACKGROUND))
    return img.astype(np.uint8)
