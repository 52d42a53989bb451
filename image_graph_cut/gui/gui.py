import copy
import logging
import sys

import numpy as np
import pygame

from image_graph_cut.config import SOLVERS, SegmentationConfig
from image_graph_cut.errors import SegmentationError
from image_graph_cut.segmentation import SegmentationEngine
from image_graph_cut.utils import BACKGROUND_RGBA, FOREGROUND_RGBA, seeds_from_scribbles

logger = logging.getLogger(__name__)

DRAW_RADIUS = 3


class Gui:
	"""
	Scribble window: left mouse button draws foreground seeds, right button background seeds.
	Enter segments, R resets the scribbles, 1 and 2 switch the min-cut solver.
	"""

	def __init__(self, config=None, segmentation_function=None):
		"""
		:param config: SegmentationConfig used by the default segmentation function
		:param segmentation_function: f(image, fg_seeds, bg_seeds, solver) -> label map, to replace the engine
		"""
		self.config = config if config is not None else SegmentationConfig()
		self.segmentation_function = segmentation_function or self.segment

		self.source_image = None
		self.scribbles = None
		self.results = None
		self.image_size = None

		self.resized_image = None
		self.resized_scribbles = None
		self.resized_results = None

		self.screen = None
		self.screen_size = None
		self.font = None
		self.message = ""

		self.image_position = (0, 0)
		self.image_zoom = 1

		self.prev_draw_pos = (0, 0)

		self.algorithms = list(SOLVERS)
		self.algorithm = self.config.solver

	def segment(self, image, fg_seeds, bg_seeds, solver):
		config = copy.copy(self.config)
		config.solver = solver
		return SegmentationEngine(config).segment(image, fg_seeds, bg_seeds).labels

	def run_segmentation(self):
		# pygame arrays are indexed [x, y]
		np_image = pygame.surfarray.array3d(self.source_image)
		np_scribbles = pygame.surfarray.array3d(self.scribbles)
		fg_seeds, bg_seeds = seeds_from_scribbles(np_scribbles)

		try:
			labels = self.segmentation_function(np_image.swapaxes(0, 1), fg_seeds, bg_seeds, self.algorithm)
		except SegmentationError as e:
			logger.warning("Segmentation failed: %s", e)
			self.message = str(e)
			return

		self.message = ""
		is_fg = np.asarray(labels).swapaxes(0, 1) == 1

		rgb_results = pygame.surfarray.pixels3d(self.results)
		alpha_results = pygame.surfarray.pixels_alpha(self.results)
		rgb_results[:, :, :] = np.where(is_fg[:, :, np.newaxis], FOREGROUND_RGBA[:3], BACKGROUND_RGBA[:3])
		alpha_results[:, :] = 128
		del rgb_results
		del alpha_results

	def reset(self):
		self.scribbles = pygame.Surface(self.image_size, pygame.SRCALPHA)
		self.scribbles.fill((0, 0, 0, 0))
		self.results = pygame.Surface(self.image_size, pygame.SRCALPHA)
		self.results.fill((0, 0, 0, 0))

	def update_screen(self, size_changed, draw_changed):
		im_w, im_h = self.image_size
		sc_w, sc_h = self.screen_size

		w_ratio = im_w / sc_w
		h_ratio = im_h / sc_h
		self.image_zoom = max(w_ratio, h_ratio)

		new_w = int(im_w / self.image_zoom)
		new_h = int(im_h / self.image_zoom)

		self.image_position = ((sc_w - new_w) // 2, (sc_h - new_h) // 2)

		if size_changed:
			self.resized_image = pygame.transform.scale(self.source_image, (new_w, new_h))
			self.resized_results = pygame.transform.scale(self.results, (new_w, new_h))

		if size_changed or draw_changed:
			self.resized_scribbles = pygame.transform.scale(self.scribbles, (new_w, new_h))
			self.screen.fill((0, 0, 0))
			self.screen.blit(self.resized_image, self.image_position)
			self.screen.blit(self.resized_results, self.image_position)
			self.screen.blit(self.resized_scribbles, self.image_position)

			alg_txt = self.font.render("Algorithm: " + self.algorithm, True, (255, 255, 255))
			self.screen.blit(alg_txt, (10, 10))
			if self.message:
				msg_txt = self.font.render(self.message, True, (255, 80, 80))
				self.screen.blit(msg_txt, (10, 35))

	def start(self, file_name):
		# --- INITIALIZING PYGAME ---
		pygame.init()
		screen_info = pygame.display.Info()
		self.screen_size = (screen_info.current_w // 2, screen_info.current_h // 2)

		self.screen = pygame.display.set_mode(self.screen_size, pygame.RESIZABLE)
		pygame.display.set_caption("Graph cut segmentation - " + file_name)
		clock = pygame.time.Clock()
		self.font = pygame.font.SysFont('consolas', 20, True)

		# --- LOADING ASSETS ---
		self.source_image = pygame.image.load(file_name).convert()
		self.image_size = (self.source_image.get_width(), self.source_image.get_height())
		self.reset()

		# --- MAIN LOOP ---
		size_changed = True
		while 1:
			draw_changed = False

			# --- EVENTS ---
			for event in pygame.event.get():
				if event.type == pygame.QUIT:
					pygame.quit()
					sys.exit()
				if event.type == pygame.KEYDOWN:
					if event.key in [pygame.K_KP_ENTER, pygame.K_RETURN]:
						self.run_segmentation()
						size_changed = True
					if event.key == pygame.K_r:
						self.reset()
						size_changed = True
					for i, key in enumerate([pygame.K_1, pygame.K_2]):
						if event.key == key and len(self.algorithms) > i:
							self.algorithm = self.algorithms[i]
							draw_changed = True

				if event.type == pygame.VIDEORESIZE:
					self.screen_size = (event.w, event.h)
					self.screen = pygame.display.set_mode(self.screen_size, pygame.RESIZABLE)
					size_changed = True

			# --- DRAWING ---
			cursor_x, cursor_y = pygame.mouse.get_pos()
			cursor_x = int((cursor_x - self.image_position[0]) * self.image_zoom)
			cursor_y = int((cursor_y - self.image_position[1]) * self.image_zoom)

			draw_mode = 0
			if pygame.mouse.get_pressed()[0]:
				draw_mode = 1
			elif pygame.mouse.get_pressed()[2]:
				draw_mode = 2

			if draw_mode > 0:
				draw_changed = True
				color = FOREGROUND_RGBA if draw_mode == 1 else BACKGROUND_RGBA

				pygame.draw.line(self.scribbles, color, self.prev_draw_pos, (cursor_x, cursor_y), DRAW_RADIUS * 2)
				pygame.draw.circle(self.scribbles, color, (cursor_x, cursor_y), DRAW_RADIUS - 1)

			self.prev_draw_pos = (cursor_x, cursor_y)

			# --- UPDATING SCREEN ---
			self.update_screen(size_changed, draw_changed)
			size_changed = False
			pygame.display.flip()
			clock.tick(120)
