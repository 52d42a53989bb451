import logging

import numpy as np

from image_graph_cut.config import check_connectivity, check_smoothness
from image_graph_cut.utils import Label

logger = logging.getLogger(__name__)


def estimate_sigma(image, connectivity=4):
    """
    :param image: PixelImage
    :param connectivity: neighbourhood used to compare pixels
    :return: mean euclidean color distance between neighbouring pixels
    """
    p, q, _ = image.neighbor_pairs(connectivity)
    if len(p) == 0:
        return 0.0
    colors = image.colors()
    return float(np.mean(np.linalg.norm(colors[p] - colors[q], axis=1)))


class CostFunction:
    """
    Energy terms of the labeling:
    - data cost of a label, read from the appearance model of that label,
    - smoothness cost between neighbours, large when colors are similar and near zero across a color edge.
    """

    def __init__(self, image, fg_model, bg_model, smoothness=0.5, connectivity=4, sigma=None):
        """
        :param image: PixelImage
        :param fg_model: appearance model built from the foreground seeds
        :param bg_model: appearance model built from the background seeds
        :param smoothness: lambda, weight of the smoothness term
        :param connectivity: 4 or 8
        :param sigma: color scale of the smoothness term, estimated from the image if None
        """
        check_smoothness(smoothness)
        check_connectivity(connectivity)
        self.image = image
        self.fg_model = fg_model
        self.bg_model = bg_model
        self.smoothness = smoothness
        self.connectivity = connectivity
        self.sigma = estimate_sigma(image, connectivity) if sigma is None else sigma

        self._data_costs = {}

    def data_cost(self, label):
        """
        :param label: Label.FOREGROUND or Label.BACKGROUND
        :return: cost of giving that label to every pixel, in node id order
        """
        label = Label(label)
        if label not in self._data_costs:
            model = self.fg_model if label == Label.FOREGROUND else self.bg_model
            self._data_costs[label] = model.costs(self.image.colors())
        return self._data_costs[label]

    def non_terminal_weights(self, sq_dist, dist):
        """
        :param sq_dist: squared color distances
        :param dist: geometric distances
        :return: the weight of the edge between two pixels.
        weight is large if pixels are similar and low if not
        """
        if self.sigma <= 0:
            return 1 / dist
        return np.exp((-1 / (2 * self.sigma ** 2)) * sq_dist) / dist

    def smoothness_cost(self, p, q, dist=None):
        """
        :param p: node ids
        :param q: node ids of neighbours of p
        :param dist: geometric distance between p and q, 1 if None
        :return: unweighted smoothness cost of every (p, q) pair
        """
        colors = self.image.colors()
        diff = colors[np.asarray(p)] - colors[np.asarray(q)]
        sq_dist = np.sum(diff * diff, axis=-1)
        if dist is None:
            dist = np.ones_like(sq_dist)
        return self.non_terminal_weights(sq_dist, dist)

    def neighbor_weights(self):
        """
        :return: neighbour pairs p, q and their capacity lambda * smoothness_cost(p, q)
        """
        p, q, dist = self.image.neighbor_pairs(self.connectivity)
        return p, q, self.smoothness * self.smoothness_cost(p, q, dist)

    def energy(self, labels):
        """
        :param labels: label map of shape (rows, cols), or flat in node id order
        :return: data costs of the labels plus the weighted smoothness costs of the cut neighbour pairs
        """
        is_fg = np.asarray(labels).ravel() == Label.FOREGROUND
        data = np.where(is_fg, self.data_cost(Label.FOREGROUND), self.data_cost(Label.BACKGROUND)).sum()

        p, q, w = self.neighbor_weights()
        cut = is_fg[p] != is_fg[q]
        total = float(data + w[cut].sum())
        logger.debug("Energy: data %.4f, total %.4f", data, total)
        return total
