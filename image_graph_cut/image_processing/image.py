from typing import Tuple

import numpy as np

NEIGHBOUR_OFFSETS = {
    4: [(0, 1), (1, 0)],
    8: [(0, 1), (1, 0), (1, 1), (1, -1)],
}


class PixelImage:
    """
    Pixel grid of shape (rows, cols, channels), with any number of channels.
    Pixels are addressed by (x, y) coordinates, x being the column. The node id of a pixel is y * cols + x.
    """

    def __init__(self, pixels):
        arr = np.asarray(pixels, dtype=np.float64)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise ValueError("Expected an array of shape (rows, cols) or (rows, cols, channels), got " + str(arr.shape))
        if arr.shape[2] == 0:
            raise ValueError("An image needs at least one channel")

        self.pixels = arr
        self.rows, self.cols, self.channels = arr.shape

    def __repr__(self):
        return "PixelImage(rows=%d, cols=%d, channels=%d)" % (self.rows, self.cols, self.channels)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def n_pixels(self) -> int:
        return self.rows * self.cols

    def colors(self) -> np.ndarray:
        """
        :return: colors of every pixel in node id order, shape (n_pixels, channels)
        """
        return self.pixels.reshape(self.n_pixels, self.channels)

    def color(self, x, y) -> np.ndarray:
        return self.pixels[y, x]

    def contains(self, coords: np.ndarray) -> np.ndarray:
        """
        :param coords: array of shape (n, 2) of (x, y) coordinates
        :return: boolean array telling which coordinates lie inside the image
        """
        x, y = coords[:, 0], coords[:, 1]
        return (x >= 0) & (x < self.cols) & (y >= 0) & (y < self.rows)

    def node_ids(self, coords: np.ndarray) -> np.ndarray:
        return coords[:, 1] * self.cols + coords[:, 0]

    def coordinates(self, node_ids) -> np.ndarray:
        node_ids = np.asarray(node_ids)
        return np.stack([node_ids % self.cols, node_ids // self.cols], axis=-1)

    def neighbor_pairs(self, connectivity=4):
        """
        Enumerates every unordered pair of adjacent pixels once.
        :param connectivity: 4 or 8
        :return: node ids p, node ids q, and the geometric distance between p and q
        """
        ids = np.arange(self.n_pixels).reshape(self.rows, self.cols)
        all_p, all_q, all_dist = [], [], []

        for dy, dx in NEIGHBOUR_OFFSETS[connectivity]:
            p = ids[0:self.rows - dy, max(0, -dx):self.cols - max(0, dx)]
            q = ids[dy:self.rows, max(0, dx):self.cols - max(0, -dx)]
            all_p.append(p.ravel())
            all_q.append(q.ravel())
            all_dist.append(np.full(p.size, np.hypot(dy, dx)))

        return np.concatenate(all_p), np.concatenate(all_q), np.concatenate(all_dist)
