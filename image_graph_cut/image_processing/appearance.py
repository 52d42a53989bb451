import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from image_graph_cut.config import check_positive_integer
from image_graph_cut.errors import InvalidConfiguration, InvalidSeedSet
from image_graph_cut.utils import as_coordinates

logger = logging.getLogger(__name__)

# Smallest probability a histogram cell can hold, so that costs stay finite
FLOOR_PROBABILITY = 1e-10


def seed_node_ids(seed_pixels, image):
    """
    :param seed_pixels: iterable of (x, y) coordinates
    :param image: PixelImage
    :return: sorted unique node ids of the seeds
    """
    coords = as_coordinates(seed_pixels)
    if len(coords) == 0:
        raise InvalidSeedSet("Seed set is empty")

    outside = ~image.contains(coords)
    if np.any(outside):
        raise InvalidSeedSet("Seeds outside of the %dx%d image: %s" % (
            image.cols, image.rows, coords[outside][:10].tolist()))

    return np.unique(image.node_ids(coords))


def channel_range(image, value_range=None):
    """
    :param image: PixelImage
    :param value_range: None to use the observed range of every channel, or (low, high), or one pair per channel
    :return: low and high arrays of shape (channels,)
    """
    if value_range is None:
        colors = image.colors()
        return colors.min(axis=0), colors.max(axis=0)

    try:
        bounds = np.broadcast_to(np.asarray(value_range, dtype=np.float64), (image.channels, 2))
    except ValueError:
        raise InvalidConfiguration("value_range must be a (low, high) pair or one pair per channel, got %r" % (value_range,))
    low, high = bounds[:, 0].copy(), bounds[:, 1].copy()
    if np.any(high < low):
        raise InvalidConfiguration("value_range has high < low: %r" % (value_range,))
    return low, high


class HistogramAppearanceModel:
    """
    Joint multi-channel histogram of the colors under a seed set.
    The histogram has `bins` equal-width cells per channel, so bins ** channels cells in total: keep bins small
    for images with many channels.
    """

    def __init__(self, bins=20, value_range=None, n_jobs=1):
        check_positive_integer('bins', bins)
        check_positive_integer('n_jobs', n_jobs)
        self.bins = bins
        self.value_range = value_range
        self.n_jobs = n_jobs

        self.low = None
        self.high = None
        self.histogram = None
        self.probabilities = None

    def build(self, seed_pixels, image):
        """
        :param seed_pixels: iterable of (x, y) coordinates, must not be empty
        :param image: PixelImage the colors are read from
        :return: self
        """
        ids = seed_node_ids(seed_pixels, image)
        self.low, self.high = channel_range(image, self.value_range)

        colors = image.colors()[ids]
        counts = self._accumulate(colors)
        self.histogram = counts.reshape((self.bins,) * image.channels)
        self.probabilities = self._normalize(counts)

        logger.debug("Histogram built from %d seeds, %d non-empty cells out of %d",
                     len(ids), np.count_nonzero(counts), counts.size)
        return self

    def cell_indices(self, colors):
        """
        :param colors: array of shape (n, channels)
        :return: flat index of the histogram cell holding each color
        """
        width = self.high - self.low
        safe_width = np.where(width > 0, width, 1)
        scaled = np.where(width > 0, (colors - self.low) / safe_width * self.bins, 0)
        idx = np.clip(np.floor(scaled).astype(np.int64), 0, self.bins - 1)
        return np.ravel_multi_index(tuple(idx.T), (self.bins,) * colors.shape[1])

    def _partial_histogram(self, colors):
        n_cells = self.bins ** colors.shape[1]
        return np.bincount(self.cell_indices(colors), minlength=n_cells)

    def _accumulate(self, colors):
        if self.n_jobs <= 1 or len(colors) < self.n_jobs:
            return self._partial_histogram(colors)

        chunks = np.array_split(colors, self.n_jobs)
        with ThreadPoolExecutor(max_workers=self.n_jobs) as executor:
            partials = list(executor.map(self._partial_histogram, chunks))
        return np.sum(partials, axis=0)

    @staticmethod
    def _normalize(counts):
        probabilities = counts / counts.sum()
        probabilities = np.maximum(probabilities, FLOOR_PROBABILITY)
        return probabilities / probabilities.sum()

    def costs(self, colors):
        """
        :param colors: array of shape (n, channels)
        :return: negative log probability of every color, finite and non-negative
        """
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, len(self.low))
        return -np.log(self.probabilities[self.cell_indices(colors)])

    def cost(self, color):
        return float(self.costs(color)[0])
