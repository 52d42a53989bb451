import argparse
import logging
import sys

from image_graph_cut.config import APPEARANCE_MODELS, CONNECTIVITIES, DEFAULT_BINS, DEFAULT_SMOOTHNESS, SOLVERS, \
	SegmentationConfig
from image_graph_cut.errors import SegmentationError
from image_graph_cut.image_io import read_image, read_seeds, write_image
from image_graph_cut.mask import ForegroundBackgroundSegmentMask
from image_graph_cut.segmentation import SegmentationEngine

logger = logging.getLogger(__name__)


def build_parser():
	parser = argparse.ArgumentParser(
		prog='image-graph-cut',
		description="Foreground/background segmentation of an image from seed masks with a graph cut. "
					"Seed masks have white pixels on the seeds and are black elsewhere.")
	parser.add_argument('image', help="image to segment, any number of channels")
	parser.add_argument('foreground', nargs='?', help="foreground seed mask")
	parser.add_argument('background', nargs='?', help="background seed mask")
	parser.add_argument('output', nargs='?', help="output mask (.png, or .fbmask to write a descriptor too)")

	parser.add_argument('--bins', type=int, default=DEFAULT_BINS, help="histogram bins per channel")
	parser.add_argument('--lambda', dest='smoothness', type=float, default=DEFAULT_SMOOTHNESS,
						help="weight of the smoothness term")
	parser.add_argument('--connectivity', type=int, choices=CONNECTIVITIES, default=4)
	parser.add_argument('--appearance', choices=APPEARANCE_MODELS, default='histogram')
	parser.add_argument('--components', type=int, default=4, help="gaussians of the gmm appearance model")
	parser.add_argument('--solver', choices=SOLVERS, default='boykov-kolmogorov')
	parser.add_argument('--jobs', type=int, default=1, help="threads used to accumulate histograms")
	parser.add_argument('--foreground-value', type=int, default=0, help="output mask value of the foreground")
	parser.add_argument('--background-value', type=int, default=255, help="output mask value of the background")
	parser.add_argument('--masked-output', help="also write the image with the background blacked out")
	parser.add_argument('--show', action='store_true', help="plot the result")
	parser.add_argument('--gui', action='store_true', help="draw the seeds in a window instead of reading masks")
	parser.add_argument('-v', '--verbose', action='store_true')
	return parser


def main(argv=None):
	parser = build_parser()
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
						format="%(asctime)s %(levelname)s %(name)s: %(message)s")

	config = SegmentationConfig(bins=args.bins, smoothness=args.smoothness, connectivity=args.connectivity,
								appearance=args.appearance, mixture_components=args.components,
								solver=args.solver, n_jobs=args.jobs, verbose=args.verbose)

	if args.gui:
		from image_graph_cut.gui.gui import Gui
		Gui(config=config).start(args.image)
		return 0

	if args.foreground is None or args.background is None or args.output is None:
		parser.error("image, foreground, background and output are required without --gui")

	logger.info("image: %s, foreground: %s, background: %s, output: %s",
				args.image, args.foreground, args.background, args.output)

	try:
		image = read_image(args.image)
		fg_seeds = read_seeds(args.foreground)
		bg_seeds = read_seeds(args.background)
		segmentation = SegmentationEngine(config).segment(image, fg_seeds, bg_seeds)

		mask = ForegroundBackgroundSegmentMask.from_segmentation(segmentation)
		mask.write(args.output, args.foreground_value, args.background_value)
		logger.info("%r written to %s", mask, args.output)

		if args.masked_output:
			write_image(args.masked_output, mask.apply_to_image(image, 0))
	except (SegmentationError, OSError, ValueError) as e:
		logger.error("Segmentation failed: %s", e)
		print("error: " + str(e), file=sys.stderr)
		return 1

	if args.show:
		from image_graph_cut.visualization import plot_segmentation
		plot_segmentation(image, segmentation.labels, fg_seeds, bg_seeds)

	return 0


if __name__ == '__main__':
	sys.exit(main())
