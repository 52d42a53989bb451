import logging
from collections import deque
from typing import Callable, Deque, List, Optional

import numpy as np
from tqdm import tqdm

from image_graph_cut.errors import SegmentationCancelled

logger = logging.getLogger(__name__)

# Parent values that are not arcs
NO_PARENT = -1	# free node
TERMINAL = -2	# root of a tree, attached to SOURCE or SINK
ORPHAN = -3

INFINITE_D = 1 << 30


class CutResult:
	def __init__(self, flow, foreground, augmentations=0):
		self.flow: float = flow
		self.foreground: np.ndarray = foreground
		self.augmentations: int = augmentations

	def __repr__(self):
		return "CutResult(flow=%r, foreground=%d/%d, augmentations=%d)" % (
			self.flow, int(self.foreground.sum()), len(self.foreground), self.augmentations)


class BoykovKolmogorov:
	"""
	Max-flow / min-cut with the two search trees of Boykov and Kolmogorov.
	A search tree grows from SOURCE and another one from SINK, an augmenting path is found when they touch, and the
	tree edges saturated by the augmentation orphan their child nodes, which then look for a new parent or become
	free.

	All the state lives in lists indexed by node id or arc id. The network is never modified, so solving twice
	gives the same cut.
	"""

	def __init__(self, eps=0.0, should_stop: Optional[Callable[[], bool]] = None, verbose=False):
		"""
		:param eps: residual capacities at or below eps count as saturated, arcs of any positive capacity carry flow with
		the default 0
		:param should_stop: polled between two augmentations, the solve is cancelled when it returns True
		:param verbose: show a progress bar of the augmenting paths
		"""
		self.eps = eps
		self.should_stop = should_stop
		self.verbose = verbose

		self.n_nodes = 0
		self.heads: List[int] = []
		self.starting_edges: List[List[int]] = []
		self.r_cap: List[float] = []
		self.tr_cap: List[float] = []

		self.parent: List[int] = []
		self.in_sink: List[bool] = []
		self.ts: List[int] = []
		self.dist: List[int] = []
		self.is_active: List[bool] = []
		self.active: Deque[int] = deque()
		self.orphans: Deque[int] = deque()

		self.time = 0
		self.flow = 0.0

	def solve(self, network) -> CutResult:
		self.reset(network)

		augmentations = 0
		current_node = -1

		with tqdm(desc="Augmenting paths", unit=" paths", disable=not self.verbose, leave=False) as progress:
			while True:
				if self.should_stop is not None and self.should_stop():
					raise SegmentationCancelled("Min-cut cancelled after %d augmenting paths" % augmentations)

				i = current_node
				if i != -1:
					self.is_active[i] = False
					if self.parent[i] == NO_PARENT:
						i = -1
				if i == -1:
					i = self.next_active()
					if i == -1:
						break

				middle_arc = self.growth_stage(i)
				self.time += 1

				if middle_arc == -1:
					current_node = -1
					continue

				# Node keeps growing after the augmentation
				self.is_active[i] = True
				current_node = i

				self.augmentation_stage(middle_arc)
				self.adoption_stage()

				augmentations += 1
				progress.update()

		foreground = self.source_side()
		logger.info("Max flow %.6g after %d augmenting paths, %d/%d nodes on the source side",
					self.flow, augmentations, int(foreground.sum()), self.n_nodes)
		return CutResult(self.flow, foreground, augmentations)

	def reset(self, network):
		"""
		Copies the capacities of the network and builds the initial trees: terminal flow that can go straight
		through a node is pushed, and the remaining terminal capacity makes the node a root of the SOURCE or SINK tree.
		"""
		n = network.n_nodes
		self.n_nodes = n
		self.heads = network.heads.tolist()
		self.r_cap = network.caps.tolist()

		starting = network.starting_edges.tolist()
		offsets = network.offsets.tolist()
		self.starting_edges = [starting[offsets[i]:offsets[i + 1]] for i in range(n)]

		self.parent = [NO_PARENT] * n
		self.in_sink = [False] * n
		self.ts = [0] * n
		self.dist = [0] * n
		self.is_active = [False] * n
		self.active = deque()
		self.orphans = deque()
		self.time = 0
		self.flow = 0.0

		source_caps = network.source_caps.tolist()
		sink_caps = network.sink_caps.tolist()
		self.tr_cap = [0.0] * n

		for i in range(n):
			self.flow += min(source_caps[i], sink_caps[i])
			tr = source_caps[i] - sink_caps[i]
			self.tr_cap[i] = tr

			if tr > self.eps:
				self.in_sink[i] = False
			elif tr < -self.eps:
				self.in_sink[i] = True
			else:
				continue

			self.parent[i] = TERMINAL
			self.ts[i] = 0
			self.dist[i] = 1
			self.set_active(i)

	def set_active(self, i):
		if not self.is_active[i]:
			self.is_active[i] = True
			self.active.append(i)

	def next_active(self) -> int:
		while len(self.active) > 0:
			i = self.active.popleft()
			self.is_active[i] = False

			# Nodes freed since they were activated are skipped
			if self.parent[i] != NO_PARENT:
				return i
		return -1

	def set_orphan_front(self, i):
		self.parent[i] = ORPHAN
		self.orphans.appendleft(i)

	def set_orphan_rear(self, i):
		self.parent[i] = ORPHAN
		self.orphans.append(i)

	def growth_stage(self, i) -> int:
		"""
		Phase 1: growing the tree of node i by one level
		:return: index of an arc going from the SOURCE tree to the SINK tree, -1 if none was found
		"""
		eps = self.eps
		heads = self.heads
		r_cap = self.r_cap
		parent = self.parent
		in_sink = self.in_sink
		ts = self.ts
		dist = self.dist

		if not in_sink[i]:
			for a in self.starting_edges[i]:
				if r_cap[a] <= eps:
					continue
				j = heads[a]
				if parent[j] == NO_PARENT:
					in_sink[j] = False
					parent[j] = a ^ 1
					ts[j] = ts[i]
					dist[j] = dist[i] + 1
					self.set_active(j)
				elif in_sink[j]:
					return a
				elif ts[j] <= ts[i] and dist[j] > dist[i]:
					# Shorter path to the source
					parent[j] = a ^ 1
					ts[j] = ts[i]
					dist[j] = dist[i] + 1
		else:
			for a in self.starting_edges[i]:
				if r_cap[a ^ 1] <= eps:
					continue
				j = heads[a]
				if parent[j] == NO_PARENT:
					in_sink[j] = True
					parent[j] = a ^ 1
					ts[j] = ts[i]
					dist[j] = dist[i] + 1
					self.set_active(j)
				elif not in_sink[j]:
					return a ^ 1
				elif ts[j] <= ts[i] and dist[j] > dist[i]:
					# Shorter path to the sink
					parent[j] = a ^ 1
					ts[j] = ts[i]
					dist[j] = dist[i] + 1

		return -1

	def augmentation_stage(self, middle_arc):
		"""
		Phase 2: pushing the bottleneck capacity along SOURCE -> ... -> middle arc -> ... -> SINK
		"""
		eps = self.eps
		heads = self.heads
		r_cap = self.r_cap
		parent = self.parent
		tr_cap = self.tr_cap

		# Finding the bottleneck, source tree side
		bottle_neck_cap = r_cap[middle_arc]
		i = heads[middle_arc ^ 1]
		while True:
			a = parent[i]
			if a == TERMINAL:
				break
			if bottle_neck_cap > r_cap[a ^ 1]:
				bottle_neck_cap = r_cap[a ^ 1]
			i = heads[a]
		if bottle_neck_cap > tr_cap[i]:
			bottle_neck_cap = tr_cap[i]

		# Sink tree side
		i = heads[middle_arc]
		while True:
			a = parent[i]
			if a == TERMINAL:
				break
			if bottle_neck_cap > r_cap[a]:
				bottle_neck_cap = r_cap[a]
			i = heads[a]
		if bottle_neck_cap > -tr_cap[i]:
			bottle_neck_cap = -tr_cap[i]

		# Pushing the flow
		r_cap[middle_arc ^ 1] += bottle_neck_cap
		r_cap[middle_arc] -= bottle_neck_cap

		i = heads[middle_arc ^ 1]
		while True:
			a = parent[i]
			if a == TERMINAL:
				break
			r_cap[a] += bottle_neck_cap
			r_cap[a ^ 1] -= bottle_neck_cap
			if r_cap[a ^ 1] <= eps:
				self.set_orphan_front(i)
			i = heads[a]
		tr_cap[i] -= bottle_neck_cap
		if tr_cap[i] <= eps:
			self.set_orphan_front(i)

		i = heads[middle_arc]
		while True:
			a = parent[i]
			if a == TERMINAL:
				break
			r_cap[a ^ 1] += bottle_neck_cap
			r_cap[a] -= bottle_neck_cap
			if r_cap[a] <= eps:
				self.set_orphan_front(i)
			i = heads[a]
		tr_cap[i] += bottle_neck_cap
		if tr_cap[i] >= -eps:
			self.set_orphan_front(i)

		self.flow += bottle_neck_cap

	def adoption_stage(self):
		"""
		Phase 3: repairing the search trees by processing orphans
		"""
		while len(self.orphans) > 0:
			i = self.orphans.popleft()
			self.process_orphan(i, self.in_sink[i])

	def origin_distance(self, j) -> int:
		"""
		:return: distance from node j to its terminal, INFINITE_D if j's path leads to an orphan
		"""
		parent = self.parent
		ts = self.ts
		dist = self.dist

		d = 0
		while True:
			if ts[j] == self.time:
				return d + dist[j]
			a = parent[j]
			d += 1
			if a == TERMINAL:
				ts[j] = self.time
				dist[j] = 1
				return d
			if a == ORPHAN:
				return INFINITE_D
			j = self.heads[a]

	def process_orphan(self, i, sink_tree):
		eps = self.eps
		heads = self.heads
		r_cap = self.r_cap
		parent = self.parent
		in_sink = self.in_sink
		ts = self.ts
		dist = self.dist

		best_arc = -1
		d_min = INFINITE_D

		# Searching for a parent in the same tree with a valid origin
		for a0 in self.starting_edges[i]:
			# Residual capacity towards i in the source tree, away from i in the sink tree
			cap = r_cap[a0] if sink_tree else r_cap[a0 ^ 1]
			if cap <= eps:
				continue
			j = heads[a0]
			if in_sink[j] != sink_tree or parent[j] == NO_PARENT:
				continue

			d = self.origin_distance(j)
			if d == INFINITE_D:
				continue
			if d < d_min:
				best_arc = a0
				d_min = d

			# Marking the path so that the next origin checks stop early
			j = heads[a0]
			while ts[j] != self.time:
				ts[j] = self.time
				dist[j] = d
				d -= 1
				j = heads[parent[j]]

		if best_arc != -1:
			parent[i] = best_arc
			ts[i] = self.time
			dist[i] = d_min + 1
			return

		# A parent wasn't found, the node becomes free
		parent[i] = NO_PARENT
		for a0 in self.starting_edges[i]:
			j = heads[a0]
			if in_sink[j] != sink_tree or parent[j] == NO_PARENT:
				continue

			cap = r_cap[a0] if sink_tree else r_cap[a0 ^ 1]
			if cap > eps:
				self.set_active(j)

			# Children become orphans
			a = parent[j]
			if a != TERMINAL and a != ORPHAN and heads[a] == i:
				self.set_orphan_rear(j)

	def source_side(self) -> np.ndarray:
		"""
		:return: boolean array, True for the nodes reachable from SOURCE in the residual graph
		"""
		eps = self.eps
		heads = self.heads
		r_cap = self.r_cap

		reached = [tr > eps for tr in self.tr_cap]
		queue = deque(i for i in range(self.n_nodes) if reached[i])
		while len(queue) > 0:
			i = queue.popleft()
			for a in self.starting_edges[i]:
				j = heads[a]
				if not reached[j] and r_cap[a] > eps:
					reached[j] = True
					queue.append(j)

		return np.array(reached, dtype=bool)
