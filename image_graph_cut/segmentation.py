import logging
import time

import numpy as np

from image_graph_cut.config import SegmentationConfig
from image_graph_cut.errors import ConflictingSeed, EmptyImage
from image_graph_cut.graphcut.boykov_kolmogorov import BoykovKolmogorov
from image_graph_cut.graphcut.maxflow_solver import MaxflowSolver
from image_graph_cut.graphcut.network import GraphBuilder
from image_graph_cut.image_processing.appearance import HistogramAppearanceModel, seed_node_ids
from image_graph_cut.image_processing.gmm_appearance import GmmAppearanceModel
from image_graph_cut.image_processing.image import PixelImage
from image_graph_cut.image_processing.weights import CostFunction
from image_graph_cut.utils import Label, as_coordinates, labels_to_rgb

logger = logging.getLogger(__name__)


class Segmentation:
	"""
	Result of one segmentation request.
	"""

	def __init__(self, labels, flow, energy):
		self.labels: np.ndarray = labels
		self.flow: float = flow
		self.energy: float = energy

	def __repr__(self):
		return "Segmentation(shape=%s, foreground=%d, flow=%.6g, energy=%.6g)" % (
			self.labels.shape, self.count_foreground(), self.flow, self.energy)

	def foreground_mask(self) -> np.ndarray:
		return self.labels == Label.FOREGROUND

	def count_foreground(self) -> int:
		return int(np.count_nonzero(self.foreground_mask()))

	def get_labeled_image(self) -> np.ndarray:
		return labels_to_rgb(self.labels)


class SegmentationEngine:
	def __init__(self, config=None, should_stop=None, **kwargs):
		"""
		:param config: SegmentationConfig, or None to build one from kwargs
		:param should_stop: callable polled by the solver, the segmentation is cancelled when it returns True
		"""
		self.config = config if config is not None else SegmentationConfig(**kwargs)
		self.should_stop = should_stop

	def make_appearance_model(self):
		if self.config.appearance == 'gmm':
			return GmmAppearanceModel(mixture_components=self.config.mixture_components,
									  value_range=self.config.value_range)
		return HistogramAppearanceModel(bins=self.config.bins, value_range=self.config.value_range,
										n_jobs=self.config.n_jobs)

	def make_solver(self):
		if self.config.solver == 'maxflow':
			return MaxflowSolver(should_stop=self.should_stop)
		return BoykovKolmogorov(should_stop=self.should_stop, verbose=self.config.verbose)

	def validate(self, image, fg_seeds, bg_seeds):
		"""
		Checks everything that can be wrong with the request before any graph work.
		:return: the image as a PixelImage
		"""
		self.config.validate()

		if not isinstance(image, PixelImage):
			if np.size(image) == 0:
				raise EmptyImage("Image has no pixel")
			image = PixelImage(image)
		if image.n_pixels == 0:
			raise EmptyImage("Image of shape %s has no pixel" % (image.pixels.shape,))

		fg_ids = seed_node_ids(fg_seeds, image)
		bg_ids = seed_node_ids(bg_seeds, image)
		conflicts = np.intersect1d(fg_ids, bg_ids)
		if len(conflicts) > 0:
			raise ConflictingSeed(map(tuple, image.coordinates(conflicts).tolist()))

		logger.debug("Validated %r: %d foreground seeds, %d background seeds, %r",
					 image, len(fg_ids), len(bg_ids), self.config)
		return image

	def segment(self, image, fg_seeds, bg_seeds) -> Segmentation:
		"""
		:param image: PixelImage, or array of shape (rows, cols) or (rows, cols, channels)
		:param fg_seeds: (x, y) coordinates of pixels that are foreground
		:param bg_seeds: (x, y) coordinates of pixels that are background
		:return: Segmentation with a label map of shape (rows, cols)
		"""
		fg_seeds = as_coordinates(fg_seeds)
		bg_seeds = as_coordinates(bg_seeds)
		image = self.validate(image, fg_seeds, bg_seeds)

		start = time.perf_counter()
		fg_model = self.make_appearance_model().build(fg_seeds, image)
		bg_model = self.make_appearance_model().build(bg_seeds, image)
		cost_function = CostFunction(image, fg_model, bg_model,
									 smoothness=self.config.smoothness, connectivity=self.config.connectivity)
		logger.debug("Appearance models built in %.3fs", time.perf_counter() - start)

		start = time.perf_counter()
		network = GraphBuilder(cost_function).build(fg_seeds, bg_seeds)
		logger.debug("Network built in %.3fs", time.perf_counter() - start)

		start = time.perf_counter()
		cut = self.make_solver().solve(network)
		logger.debug("Cut found in %.3fs", time.perf_counter() - start)

		labels = np.where(cut.foreground, int(Label.FOREGROUND), int(Label.BACKGROUND)).astype(np.uint8)
		labels = labels.reshape(image.shape)
		segmentation = Segmentation(labels, cut.flow, cost_function.energy(labels))

		logger.info("Segmented %dx%d image: %d foreground pixels out of %d",
					image.cols, image.rows, segmentation.count_foreground(), image.n_pixels)
		return segmentation


def segment(image, fg_seeds, bg_seeds, **kwargs) -> Segmentation:
	return SegmentationEngine(**kwargs).segment(image, fg_seeds, bg_seeds)
