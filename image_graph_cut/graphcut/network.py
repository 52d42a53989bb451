import logging
from typing import List

import numpy as np

from image_graph_cut.errors import ConflictingSeed
from image_graph_cut.image_processing.appearance import seed_node_ids
from image_graph_cut.image_processing.weights import CostFunction
from image_graph_cut.utils import Label

logger = logging.getLogger(__name__)

# Capacity of the terminal edge that ties a seed to its terminal
HARD_CONSTRAINT = np.inf


class Network:
	"""
	Flow network with one node per pixel and two implicit terminals, SOURCE (foreground) and SINK (background).
	Terminal edges are stored per node. Neighbour edges are stored as arcs: arc 2k goes from tails[2k] to heads[2k]
	and arc 2k + 1 is its reverse, so the reverse of arc a is a ^ 1.
	"""

	def __init__(self, n_nodes, source_caps, sink_caps, pair_p, pair_q, pair_caps):
		self.n_nodes: int = n_nodes
		self.source_caps: np.ndarray = np.asarray(source_caps, dtype=np.float64)
		self.sink_caps: np.ndarray = np.asarray(sink_caps, dtype=np.float64)

		pair_p = np.asarray(pair_p, dtype=np.int64)
		pair_q = np.asarray(pair_q, dtype=np.int64)
		pair_caps = np.asarray(pair_caps, dtype=np.float64)

		for name, caps in (('source', self.source_caps), ('sink', self.sink_caps), ('neighbour', pair_caps)):
			# NaN fails the comparison too
			if not np.all(caps >= 0):
				raise ValueError("%s capacities must be non-negative, got %s" % (
					name, caps[~(caps >= 0)][:10].tolist()))

		# Interleaving p -> q and q -> p
		self.tails = np.empty(2 * len(pair_p), dtype=np.int64)
		self.heads = np.empty(2 * len(pair_p), dtype=np.int64)
		self.caps = np.empty(2 * len(pair_p), dtype=np.float64)
		self.tails[0::2], self.tails[1::2] = pair_p, pair_q
		self.heads[0::2], self.heads[1::2] = pair_q, pair_p
		self.caps[0::2], self.caps[1::2] = pair_caps, pair_caps

		# Outgoing arcs of node i are starting_edges[offsets[i]:offsets[i + 1]], in creation order
		self.starting_edges = np.argsort(self.tails, kind='stable')
		self.offsets = np.zeros(n_nodes + 1, dtype=np.int64)
		np.cumsum(np.bincount(self.tails, minlength=n_nodes), out=self.offsets[1:])

	def __repr__(self):
		return "Network(nodes=%d, arcs=%d)" % (self.n_nodes, self.n_arcs)

	@property
	def n_arcs(self) -> int:
		return len(self.heads)

	def outgoing_arcs(self, node) -> List[int]:
		return self.starting_edges[self.offsets[node]:self.offsets[node + 1]].tolist()

	def cut_capacity(self, foreground) -> float:
		"""
		:param foreground: boolean array, True for nodes on the SOURCE side
		:return: total capacity of the edges going from the SOURCE side to the SINK side
		"""
		foreground = np.asarray(foreground, dtype=bool).ravel()
		background = ~foreground

		# SOURCE -> background node, foreground node -> SINK
		total = self.source_caps[background].sum() + self.sink_caps[foreground].sum()
		crossing = foreground[self.tails] & background[self.heads]
		return float(total + self.caps[crossing].sum())


class GraphBuilder:
	"""
	Encodes the labeling energy of a CostFunction into a Network.
	The SOURCE edge of a pixel is cut when the pixel ends on the background side, so it carries the background data
	cost; the SINK edge carries the foreground data cost.
	"""

	def __init__(self, cost_function):
		self.cost_function = cost_function

	def build(self, fg_seeds, bg_seeds) -> Network:
		image = self.cost_function.image
		fg_ids = seed_node_ids(fg_seeds, image)
		bg_ids = seed_node_ids(bg_seeds, image)

		conflicts = np.intersect1d(fg_ids, bg_ids)
		if len(conflicts) > 0:
			raise ConflictingSeed(map(tuple, image.coordinates(conflicts).tolist()))

		source_caps = self.cost_function.data_cost(Label.BACKGROUND).copy()
		sink_caps = self.cost_function.data_cost(Label.FOREGROUND).copy()

		# Hard constraints
		source_caps[fg_ids] = HARD_CONSTRAINT
		sink_caps[fg_ids] = 0
		source_caps[bg_ids] = 0
		sink_caps[bg_ids] = HARD_CONSTRAINT

		pair_p, pair_q, pair_caps = self.cost_function.neighbor_weights()
		network = Network(image.n_pixels, source_caps, sink_caps, pair_p, pair_q, pair_caps)

		logger.debug("Built %r with %d foreground and %d background seeds", network, len(fg_ids), len(bg_ids))
		return network


def build_network(image, fg_model, bg_model, smoothness, fg_seeds, bg_seeds, connectivity=4) -> Network:
	cost_function = CostFunction(image, fg_model, bg_model, smoothness=smoothness, connectivity=connectivity)
	return GraphBuilder(cost_function).build(fg_seeds, bg_seeds)
