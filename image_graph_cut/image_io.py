import logging
import os

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def read_image(filename, keep_alpha=False):
    """
    :param filename: any image format OpenCV can decode, with any number of channels
    :param keep_alpha: alpha channels are dropped unless True, they would take part in the segmentation otherwise
    :return: numpy array of shape (rows, cols) or (rows, cols, channels), RGB order for color images
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(filename)
    img = cv2.imread(filename, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError("Could not decode image " + filename)

    if img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        if not keep_alpha:
            img = img[:, :, :3]
    elif img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    logger.debug("Read image %s with shape %s", filename, img.shape)
    return img


def write_image(filename, img):
    """
    :param img: numpy array of shape (rows, cols) or (rows, cols, 3) in RGB order
    """
    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    try:
        written = cv2.imwrite(filename, img)
    except cv2.error as e:
        # Unknown extensions raise instead of returning False
        raise ValueError("Could not write image %s: %s" % (filename, e))
    if not written:
        raise ValueError("Could not write image " + filename)
    logger.debug("Wrote image %s", filename)


def read_seeds(filename):
    """
    :param filename: seed image, non-zero (white) pixels are seeds and black pixels are not
    :return: (x, y) coordinates of the seeds, shape (n, 2)
    """
    img = read_image(filename)
    if img.ndim == 3:
        img = img.max(axis=2)
    ys, xs = np.nonzero(img)
    return np.stack([xs, ys], axis=-1)
