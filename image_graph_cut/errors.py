class SegmentationError(Exception):
    """Base class of every error raised by the segmentation engine."""


class EmptyImage(SegmentationError, ValueError):
    """The image has no pixel."""


class InvalidSeedSet(SegmentationError, ValueError):
    """A seed set is empty or references coordinates outside the image."""


class ConflictingSeed(SegmentationError, ValueError):
    """A pixel is both a foreground and a background seed."""

    def __init__(self, pixels):
        self.pixels = list(pixels)
        super().__init__("Pixels seeded as both foreground and background: " + str(self.pixels[:10]))


class InvalidConfiguration(SegmentationError, ValueError):
    """Histogram bins, smoothness weight or another setting is out of range."""


class SegmentationCancelled(SegmentationError):
    """The min-cut search was stopped between two augmentations."""


class MaskFormatError(SegmentationError):
    """A foreground/background mask file cannot be read."""
