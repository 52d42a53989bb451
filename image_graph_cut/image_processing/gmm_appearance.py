import logging

import numpy as np
from sklearn.mixture import GaussianMixture

from image_graph_cut.config import check_positive_integer
from image_graph_cut.image_processing.appearance import FLOOR_PROBABILITY, channel_range, seed_node_ids

logger = logging.getLogger(__name__)

# Every channel is rescaled to [0, COLOR_SCALE] before fitting
COLOR_SCALE = 255.0


class GmmAppearanceModel:
    """
    Gaussian mixture fitted on the colors under a seed set.

    Colors are rescaled by the range of the image, and every covariance gets one unit of variance added, so the
    density stays below 1 and the cost -log(density) is positive and grows with the distance to the mixture.
    Costs are capped at -log(FLOOR_PROBABILITY) like the histogram costs: colors far from both models cost the
    same under both.
    """

    def __init__(self, mixture_components=4, random_state=0, value_range=None):
        """
        :param mixture_components: number of gaussians, capped at the number of distinct seeds
        :param random_state: seed of the mixture initialization
        :param value_range: optional (low, high) pair, or one pair per channel, used to rescale colors
        """
        check_positive_integer('mixture_components', mixture_components)
        self.mixture_components = mixture_components
        self.random_state = random_state
        self.value_range = value_range

        self.low = None
        self.scale = None
        self.model = None

    def build(self, seed_pixels, image):
        ids = seed_node_ids(seed_pixels, image)
        low, high = channel_range(image, self.value_range)
        width = high - low
        self.low = low
        self.scale = COLOR_SCALE / np.where(width > 0, width, 1)

        samples = self._rescale(image.colors()[ids])

        # A mixture can't have more components than samples
        n_components = min(self.mixture_components, len(samples))
        self.model = GaussianMixture(n_components=n_components, reg_covar=1.0, random_state=self.random_state)
        self.model.fit(samples)

        logger.debug("Gaussian mixture with %d components fitted on %d seeds", n_components, len(samples))
        return self

    def _rescale(self, colors):
        return (colors - self.low) * self.scale

    def costs(self, colors):
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, self.model.n_features_in_)
        log_density = self.model.score_samples(self._rescale(colors))
        return np.clip(-log_density, 0, -np.log(FLOOR_PROBABILITY))

    def cost(self, color):
        return float(self.costs(color)[0])
