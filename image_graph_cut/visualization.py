import matplotlib.pyplot as plt
import numpy as np

from image_graph_cut.utils import labels_to_rgb


def display_image(image):
    """
    :param image: array of shape (rows, cols) or (rows, cols, channels), any dtype
    :return: image scaled into [0, 1] with 1 or 3 channels, ready for imshow
    """
    img = np.asarray(image, dtype=np.float64)
    if img.ndim == 3 and img.shape[2] > 3:
        img = img[:, :, :3]
    elif img.ndim == 3 and img.shape[2] < 3:
        img = img.mean(axis=2)

    low, high = img.min(), img.max()
    if high <= low:
        return np.zeros_like(img)
    return (img - low) / (high - low)


def plot_segmentation(image, labels, fg_seeds=None, bg_seeds=None, alpha=0.5, show=True):
    """
    Plots the image, the label map, and the labels over the image.
    :param fg_seeds: optional (x, y) foreground seeds drawn in blue
    :param bg_seeds: optional (x, y) background seeds drawn in red
    :return: the matplotlib figure
    """
    img = display_image(image)
    labeled = labels_to_rgb(labels) / 255

    fig, axs = plt.subplots(1, 3, sharex=True, sharey=True, figsize=(12, 4))
    axs[0].imshow(img, cmap='gray')
    axs[0].set_title("Image")
    axs[1].imshow(labeled)
    axs[1].set_title("Labels")

    axs[2].imshow(img, cmap='gray')
    axs[2].imshow(labeled, alpha=alpha)
    axs[2].set_title("Overlay")

    for seeds, color in ((fg_seeds, "#0000ff"), (bg_seeds, "#ff0000")):
        if seeds is not None and len(seeds) > 0:
            seeds = np.asarray(seeds)
            axs[0].scatter(seeds[:, 0], seeds[:, 1], s=4, color=color)

    for ax in axs:
        ax.set_axis_off()
    fig.tight_layout()

    if show:
        plt.show()
    return fig
