import numpy as np
import pytest

from image_graph_cut.errors import InvalidConfiguration
from image_graph_cut.image_processing.appearance import HistogramAppearanceModel
from image_graph_cut.image_processing.image import PixelImage
from image_graph_cut.image_processing.weights import CostFunction, estimate_sigma
from image_graph_cut.utils import Label


def make_cost_function(pixels, fg, bg, bins=4, smoothness=1.0, connectivity=4):
    image = PixelImage(pixels)
    fg_model = HistogramAppearanceModel(bins=bins).build(fg, image)
    bg_model = HistogramAppearanceModel(bins=bins).build(bg, image)
    return CostFunction(image, fg_model, bg_model, smoothness=smoothness, connectivity=connectivity)


def test_neighbor_pairs():
    image = PixelImage(np.zeros((2, 3)))

    p, q, dist = image.neighbor_pairs(4)
    assert len(p) == 2 * 2 + 1 * 3
    assert set(zip(p.tolist(), q.tolist())) == {(0, 1), (1, 2), (3, 4), (4, 5), (0, 3), (1, 4), (2, 5)}
    assert np.all(dist == 1)

    p, q, dist = image.neighbor_pairs(8)
    assert len(p) == 7 + 4
    assert (0, 4) in set(zip(p.tolist(), q.tolist()))
    assert (1, 3) in set(zip(p.tolist(), q.tolist()))
    assert np.isclose(dist, np.sqrt(2)).sum() == 4


def test_estimate_sigma():
    assert estimate_sigma(PixelImage(np.array([[0, 10, 10]]))) == pytest.approx(5.0)
    assert estimate_sigma(PixelImage(np.array([[3]]))) == 0.0


def test_smoothness_is_symmetric_and_edge_aware():
    cf = make_cost_function(np.array([[10, 10, 200, 190]]), [(0, 0)], [(3, 0)])

    assert cf.smoothness_cost(0, 1) == pytest.approx(1.0)
    assert cf.smoothness_cost(1, 2) == pytest.approx(cf.smoothness_cost(2, 1))
    assert cf.smoothness_cost(1, 2) < 0.1
    assert np.all(cf.smoothness_cost([0, 1, 2], [1, 2, 3]) >= 0)


def test_smoothness_distance_normalization():
    cf = make_cost_function(np.full((2, 2), 5.0), [(0, 0)], [(1, 1)], connectivity=8)
    assert cf.smoothness_cost(0, 3, np.sqrt(2)) == pytest.approx(1 / np.sqrt(2))


def test_zero_smoothness_disables_neighbor_edges():
    cf = make_cost_function(np.array([[10, 10, 200]]), [(0, 0)], [(2, 0)], smoothness=0)
    _, _, w = cf.neighbor_weights()
    assert np.all(w == 0)


def test_data_cost_reads_the_label_model():
    cf = make_cost_function(np.array([[10, 10, 200]]), [(0, 0)], [(2, 0)])

    fg_costs = cf.data_cost(Label.FOREGROUND)
    bg_costs = cf.data_cost(Label.BACKGROUND)
    np.testing.assert_allclose(fg_costs, cf.fg_model.costs(cf.image.colors()))
    assert fg_costs[1] < bg_costs[1]
    assert fg_costs[2] > bg_costs[2]


def test_energy():
    cf = make_cost_function(np.array([[10, 10, 200]]), [(0, 0)], [(2, 0)], smoothness=2.0)
    fg_costs = cf.data_cost(Label.FOREGROUND)
    bg_costs = cf.data_cost(Label.BACKGROUND)

    expected = fg_costs[0] + fg_costs[1] + bg_costs[2] + 2.0 * cf.smoothness_cost(1, 2)
    assert cf.energy(np.array([[1, 1, 0]])) == pytest.approx(expected)

    expected = fg_costs.sum()
    assert cf.energy(np.array([[1, 1, 1]])) == pytest.approx(expected)


def test_negative_smoothness_is_rejected():
    with pytest.raises(InvalidConfiguration):
        make_cost_function(np.array([[10, 10, 200]]), [(0, 0)], [(2, 0)], smoothness=-0.1)
