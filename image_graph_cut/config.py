import math
import numbers

from image_graph_cut.errors import InvalidConfiguration

DEFAULT_BINS = 20
DEFAULT_SMOOTHNESS = 0.5

CONNECTIVITIES = (4, 8)
APPEARANCE_MODELS = ('histogram', 'gmm')
SOLVERS = ('boykov-kolmogorov', 'maxflow')


class SegmentationConfig:
	def __init__(self, bins=DEFAULT_BINS, smoothness=DEFAULT_SMOOTHNESS, connectivity=4, value_range=None,
				 appearance='histogram', mixture_components=4, solver='boykov-kolmogorov', n_jobs=1, verbose=False):
		"""
		:param bins: histogram resolution per channel
		:param smoothness: weight (lambda) of the spatial coherence term, 0 disables it
		:param connectivity: 4 or 8 connected neighbourhood
		:param value_range: optional (low, high) pair, or one pair per channel, used for histogram bin edges.
		By default the observed range of the image is used.
		:param appearance: 'histogram' or 'gmm'
		:param mixture_components: number of gaussians of the 'gmm' appearance model
		:param solver: 'boykov-kolmogorov' or 'maxflow' (PyMaxflow)
		:param n_jobs: number of threads used to accumulate histograms
		:param verbose: show solver progress
		"""
		self.bins = bins
		self.smoothness = smoothness
		self.connectivity = connectivity
		self.value_range = value_range
		self.appearance = appearance
		self.mixture_components = mixture_components
		self.solver = solver
		self.n_jobs = n_jobs
		self.verbose = verbose

	def __repr__(self):
		return "SegmentationConfig(bins=%r, smoothness=%r, connectivity=%r, appearance=%r, solver=%r)" % (
			self.bins, self.smoothness, self.connectivity, self.appearance, self.solver)

	def validate(self):
		check_positive_integer('bins', self.bins)
		check_smoothness(self.smoothness)
		check_connectivity(self.connectivity)
		if self.appearance not in APPEARANCE_MODELS:
			raise InvalidConfiguration("unknown appearance model %r" % (self.appearance,))
		if self.solver not in SOLVERS:
			raise InvalidConfiguration("unknown solver %r" % (self.solver,))
		check_positive_integer('mixture_components', self.mixture_components)
		check_positive_integer('n_jobs', self.n_jobs)
		return self


def check_positive_integer(name, value):
	if not isinstance(value, numbers.Integral) or value < 1:
		raise InvalidConfiguration("%s must be an integer >= 1, got %r" % (name, value))


def check_smoothness(smoothness):
	if not isinstance(smoothness, numbers.Real) or not 0 <= smoothness < math.inf:
		raise InvalidConfiguration("smoothness must be a finite number >= 0, got %r" % (smoothness,))


def check_connectivity(connectivity):
	if connectivity not in CONNECTIVITIES:
		raise InvalidConfiguration("connectivity must be 4 or 8, got %r" % (connectivity,))
