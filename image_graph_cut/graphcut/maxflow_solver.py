import logging

import maxflow
import numpy as np

from image_graph_cut.errors import SegmentationCancelled
from image_graph_cut.graphcut.boykov_kolmogorov import CutResult

logger = logging.getLogger(__name__)


class MaxflowSolver:
	"""
	Same interface as BoykovKolmogorov, backed by the C++ implementation of PyMaxflow.
	PyMaxflow puts the nodes left in neither search tree on the source side, which is another minimum cut.
	"""

	def __init__(self, should_stop=None):
		self.should_stop = should_stop

	@staticmethod
	def hard_constraint_value(network):
		"""
		:return: finite stand-in for infinite capacities, larger than any cut made of finite edges
		"""
		finite = np.concatenate([network.source_caps, network.sink_caps, network.caps])
		finite = finite[np.isfinite(finite)]
		return float(finite.sum()) + 1.0

	def solve(self, network) -> CutResult:
		infinity = self.hard_constraint_value(network)
		source_caps = np.where(np.isinf(network.source_caps), infinity, network.source_caps)
		sink_caps = np.where(np.isinf(network.sink_caps), infinity, network.sink_caps)

		g = maxflow.Graph[float](network.n_nodes, network.n_arcs // 2)
		nodes = g.add_nodes(network.n_nodes)

		for node_id in range(network.n_nodes):
			g.add_tedge(nodes[node_id], source_caps[node_id], sink_caps[node_id])

		# Arcs 2k and 2k + 1 are the two directions of the same neighbour pair
		for k in range(0, network.n_arcs, 2):
			p, q = network.tails[k], network.heads[k]
			g.add_edge(nodes[p], nodes[q], network.caps[k], network.caps[k + 1])

		# The C++ search can't be interrupted, cancellation is only checked before it starts
		if self.should_stop is not None and self.should_stop():
			raise SegmentationCancelled("Min-cut cancelled before PyMaxflow started")

		flow = g.maxflow()
		foreground = np.array([g.get_segment(nodes[node_id]) == 0 for node_id in range(network.n_nodes)], dtype=bool)

		logger.info("PyMaxflow max flow %.6g, %d/%d nodes on the source side",
					flow, int(foreground.sum()), network.n_nodes)
		return CutResult(float(flow), foreground)
