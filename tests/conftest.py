import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from image_graph_cut.graphcut.network import Network
from image_graph_cut.image_processing.image import PixelImage


def random_network(seed, rows=3, cols=4, connectivity=4, hard=False):
    """
    Grid network with random terminal and neighbour capacities.
    With hard=True the first node is tied to SOURCE and the last one to SINK with infinite capacities.
    """
    rng = np.random.default_rng(seed)
    n = rows * cols
    source_caps = rng.uniform(0, 5, n) * (rng.random(n) < 0.6)
    sink_caps = rng.uniform(0, 5, n) * (rng.random(n) < 0.6)
    if hard:
        source_caps[0], sink_caps[0] = np.inf, 0
        source_caps[-1], sink_caps[-1] = 0, np.inf

    p, q, _ = PixelImage(np.zeros((rows, cols))).neighbor_pairs(connectivity)
    return Network(n, source_caps, sink_caps, p, q, rng.uniform(0, 3, len(p)))


@pytest.fixture
def two_region_image():
    """
    8x10 RGB image, dark on the left half and bright on the right half, with a little noise.
    """
    rng = np.random.default_rng(0)
    img = np.zeros((8, 10, 3))
    img[:, :5] = 30
    img[:, 5:] = 220
    return np.clip(img + rng.normal(0, 4, img.shape), 0, 255).astype(np.uint8)


@pytest.fixture
def two_region_seeds():
    fg = [(0, y) for y in range(8)]
    bg = [(9, y) for y in range(8)]
    return fg, bg
