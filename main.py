import sys

from image_graph_cut.cli import main

sys.exit(main())
