import logging
import os

import numpy as np

from image_graph_cut.errors import MaskFormatError
from image_graph_cut.image_io import read_image, write_image
from image_graph_cut.utils import Label

logger = logging.getLogger(__name__)

FBMASK_EXTENSION = '.fbmask'


class ForegroundBackgroundSegmentMask:
    """
    Foreground/background label map that can be persisted.

    The .fbmask descriptor format is:
    foreground 0
    background 255
    Mask.png

    The foreground and background lines can come in either order, their values are the pixel values used in the
    mask image, whose path is relative to the descriptor.
    """

    def __init__(self, labels):
        self.labels = np.asarray(labels, dtype=np.uint8)

    def __repr__(self):
        return "ForegroundBackgroundSegmentMask(shape=%s, foreground=%d, background=%d)" % (
            self.labels.shape, self.count_foreground_pixels(), self.count_background_pixels())

    @classmethod
    def from_segmentation(cls, segmentation):
        return cls(segmentation.labels)

    @classmethod
    def read(cls, filename):
        _, extension = os.path.splitext(filename)
        if extension != FBMASK_EXTENSION:
            raise MaskFormatError("Cannot read files with extension other than %s, got %r. "
                                  "You might want read_from_image instead." % (FBMASK_EXTENSION, extension))
        if not os.path.exists(filename):
            raise FileNotFoundError(filename)

        with open(filename) as f:
            lines = [line.strip() for line in f.readlines()]
        if len(lines) < 3:
            raise MaskFormatError("Invalid .fbmask file %s: expected 3 lines, got %d" % (filename, len(lines)))

        values = {}
        for line in lines[:2]:
            parts = line.split()
            if len(parts) != 2 or parts[0] not in ('foreground', 'background'):
                raise MaskFormatError("Invalid .fbmask file %s: unexpected line %r" % (filename, line))
            if parts[0] in values:
                raise MaskFormatError("Invalid .fbmask file %s: %s value listed twice" % (filename, parts[0]))
            try:
                values[parts[0]] = int(parts[1])
            except ValueError:
                raise MaskFormatError("Invalid .fbmask file %s: %r is not an integer" % (filename, parts[1]))

        image_filename = lines[2]
        if len(image_filename) == 0:
            raise MaskFormatError("Invalid .fbmask file %s: image file name is empty" % filename)

        logger.info("Mask descriptor %s: foreground value %d, background value %d",
                    filename, values['foreground'], values['background'])
        path = os.path.join(os.path.dirname(filename), image_filename)
        return cls.read_from_image(path, values['foreground'], values['background'])

    @classmethod
    def read_from_image(cls, filename, foreground_value=0, background_value=255):
        img = read_image(filename)
        if img.ndim == 3:
            img = img[:, :, 0]

        is_fg = img == foreground_value
        is_bg = img == background_value
        unknown = ~(is_fg | is_bg)
        if np.any(unknown):
            raise MaskFormatError("Mask %s has pixel values other than %d and %d: %s" % (
                filename, foreground_value, background_value, np.unique(img[unknown])[:10].tolist()))

        return cls(np.where(is_fg, int(Label.FOREGROUND), int(Label.BACKGROUND)))

    def write(self, filename, foreground_value=0, background_value=255):
        """
        Writes the mask image, and a descriptor next to it when filename ends with .fbmask
        """
        root, extension = os.path.splitext(filename)
        image_filename = filename
        if extension == FBMASK_EXTENSION:
            image_filename = root + '.png'
            with open(filename, 'w') as f:
                f.write("foreground %d\n" % foreground_value)
                f.write("background %d\n" % background_value)
                f.write(os.path.basename(image_filename) + "\n")

        img = np.where(self.is_foreground_mask(), foreground_value, background_value).astype(np.uint8)
        write_image(image_filename, img)

    def is_foreground_mask(self):
        return self.labels == Label.FOREGROUND

    def is_foreground(self, x, y):
        return bool(self.labels[y, x] == Label.FOREGROUND)

    def is_background(self, x, y):
        return bool(self.labels[y, x] == Label.BACKGROUND)

    def count_foreground_pixels(self):
        return int(np.count_nonzero(self.labels == Label.FOREGROUND))

    def count_background_pixels(self):
        return int(np.count_nonzero(self.labels == Label.BACKGROUND))

    def foreground_pixels(self):
        """
        :return: (x, y) coordinates of the foreground pixels
        """
        ys, xs = np.nonzero(self.labels == Label.FOREGROUND)
        return np.stack([xs, ys], axis=-1)

    def background_pixels(self):
        ys, xs = np.nonzero(self.labels == Label.BACKGROUND)
        return np.stack([xs, ys], axis=-1)

    def apply_to_image(self, image, background_color):
        """
        :param image: numpy array of shape (rows, cols) or (rows, cols, channels)
        :param background_color: value painted over background pixels
        :return: copy of the image where only the foreground is kept
        """
        result = np.array(image, copy=True)
        result[self.labels == Label.BACKGROUND] = background_color
        return result
