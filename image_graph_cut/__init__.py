from image_graph_cut.config import SegmentationConfig
from image_graph_cut.errors import *
from image_graph_cut.graphcut.boykov_kolmogorov import BoykovKolmogorov, CutResult
from image_graph_cut.graphcut.maxflow_solver import MaxflowSolver
from image_graph_cut.graphcut.network import GraphBuilder, Network, build_network
from image_graph_cut.image_processing.appearance import HistogramAppearanceModel
from image_graph_cut.image_processing.gmm_appearance import GmmAppearanceModel
from image_graph_cut.image_processing.image import PixelImage
from image_graph_cut.image_processing.weights import CostFunction
from image_graph_cut.mask import ForegroundBackgroundSegmentMask
from image_graph_cut.segmentation import Segmentation, SegmentationEngine, segment
from image_graph_cut.utils import BACKGROUND, FOREGROUND, Label
