import numpy as np
import pytest

from image_graph_cut.errors import MaskFormatError
from image_graph_cut.image_io import read_image, read_seeds, write_image
from image_graph_cut.mask import ForegroundBackgroundSegmentMask
from image_graph_cut.segmentation import segment


@pytest.fixture
def labels():
    labels = np.zeros((4, 5), dtype=np.uint8)
    labels[1:3, 1:4] = 1
    return labels


def test_counts_and_queries(labels):
    mask = ForegroundBackgroundSegmentMask(labels)

    assert mask.count_foreground_pixels() == 6
    assert mask.count_background_pixels() == 14
    assert mask.is_foreground(1, 1)
    assert mask.is_background(0, 0)
    assert not mask.is_foreground(4, 1)
    assert (1, 1) in map(tuple, mask.foreground_pixels().tolist())
    assert len(mask.background_pixels()) == 14


def test_fbmask_round_trip(tmp_path, labels):
    filename = str(tmp_path / "mask.fbmask")
    ForegroundBackgroundSegmentMask(labels).write(filename, 0, 255)

    with open(filename) as f:
        assert f.read().splitlines() == ["foreground 0", "background 255", "mask.png"]
    assert read_image(str(tmp_path / "mask.png"))[1, 1] == 0

    mask = ForegroundBackgroundSegmentMask.read(filename)
    np.testing.assert_array_equal(mask.labels, labels)


def test_background_line_first(tmp_path, labels):
    write_image(str(tmp_path / "m.png"), np.where(labels == 1, 7, 3).astype(np.uint8))
    with open(str(tmp_path / "m.fbmask"), "w") as f:
        f.write("background 3\nforeground 7\nm.png\n")

    mask = ForegroundBackgroundSegmentMask.read(str(tmp_path / "m.fbmask"))
    np.testing.assert_array_equal(mask.labels, labels)


def test_read_errors(tmp_path, labels):
    with pytest.raises(MaskFormatError):
        ForegroundBackgroundSegmentMask.read(str(tmp_path / "mask.txt"))
    with pytest.raises(FileNotFoundError):
        ForegroundBackgroundSegmentMask.read(str(tmp_path / "missing.fbmask"))

    write_image(str(tmp_path / "m.png"), np.where(labels == 1, 0, 255).astype(np.uint8))
    for content in ["foreground 0\nforeground 255\nm.png\n",
                    "foreground 0\nbackground white\nm.png\n",
                    "foreground 0\nbackground 255\n",
                    "front 0\nbackground 255\nm.png\n"]:
        with open(str(tmp_path / "bad.fbmask"), "w") as f:
            f.write(content)
        with pytest.raises(MaskFormatError):
            ForegroundBackgroundSegmentMask.read(str(tmp_path / "bad.fbmask"))


def test_unknown_pixel_values(tmp_path, labels):
    write_image(str(tmp_path / "m.png"), np.where(labels == 1, 0, 128).astype(np.uint8))
    with pytest.raises(MaskFormatError):
        ForegroundBackgroundSegmentMask.read_from_image(str(tmp_path / "m.png"))


def test_apply_to_image(labels):
    image = np.full((4, 5, 3), 100, dtype=np.uint8)
    masked = ForegroundBackgroundSegmentMask(labels).apply_to_image(image, 0)

    assert masked[1, 1].tolist() == [100, 100, 100]
    assert masked[0, 0].tolist() == [0, 0, 0]
    assert image[0, 0].tolist() == [100, 100, 100]


def test_from_segmentation():
    result = segment(np.array([[10, 10, 200]]), [(0, 0)], [(2, 0)], bins=4, smoothness=0)
    mask = ForegroundBackgroundSegmentMask.from_segmentation(result)
    assert mask.count_foreground_pixels() == 2
    assert "foreground=2" in repr(mask)


def test_read_seeds(tmp_path):
    seeds = np.zeros((3, 4), dtype=np.uint8)
    seeds[0, 1] = 255
    seeds[2, 3] = 255
    write_image(str(tmp_path / "seeds.png"), seeds)

    assert sorted(map(tuple, read_seeds(str(tmp_path / "seeds.png")).tolist())) == [(1, 0), (3, 2)]


def test_read_missing_image(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_image(str(tmp_path / "nothing.png"))
