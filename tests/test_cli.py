import numpy as np
import pytest

from image_graph_cut.cli import build_parser, main
from image_graph_cut.image_io import read_image, write_image


@pytest.fixture
def inputs(tmp_path, two_region_image):
    fg = np.zeros((8, 10), dtype=np.uint8)
    fg[:, 0] = 255
    bg = np.zeros((8, 10), dtype=np.uint8)
    bg[:, 9] = 255

    write_image(str(tmp_path / "image.png"), two_region_image)
    write_image(str(tmp_path / "fg.png"), fg)
    write_image(str(tmp_path / "bg.png"), bg)
    return str(tmp_path / "image.png"), str(tmp_path / "fg.png"), str(tmp_path / "bg.png")


def test_defaults():
    args = build_parser().parse_args(["image.png", "fg.png", "bg.png", "out.png"])
    assert args.bins == 20
    assert args.smoothness == 0.5
    assert args.connectivity == 4
    assert args.solver == 'boykov-kolmogorov'


def test_segments_to_a_png(tmp_path, inputs):
    output = str(tmp_path / "out.png")
    assert main(list(inputs) + [output, "--bins", "8"]) == 0

    mask = read_image(output)
    assert mask.shape == (8, 10)
    assert np.all(mask[:, :5] == 0)
    assert np.all(mask[:, 5:] == 255)


def test_segments_to_an_fbmask(tmp_path, inputs):
    output = str(tmp_path / "out.fbmask")
    masked = str(tmp_path / "masked.png")
    assert main(list(inputs) + [output, "--bins", "8", "--lambda", "2", "--connectivity", "8",
                                "--solver", "maxflow", "--masked-output", masked]) == 0

    with open(output) as f:
        assert f.read().splitlines() == ["foreground 0", "background 255", "out.png"]
    assert read_image(masked)[:, 5:].max() == 0
    assert read_image(masked)[:, :5].min() > 0


def test_empty_seed_mask(tmp_path, inputs, capsys):
    image, fg, _ = inputs
    empty = str(tmp_path / "empty.png")
    write_image(empty, np.zeros((8, 10), dtype=np.uint8))

    assert main([image, empty, fg, str(tmp_path / "out.png")]) == 1
    assert "error:" in capsys.readouterr().err


def test_missing_image(tmp_path, inputs):
    _, fg, bg = inputs
    assert main([str(tmp_path / "nope.png"), fg, bg, str(tmp_path / "out.png")]) == 1


def test_invalid_option(tmp_path, inputs):
    assert main(list(inputs) + [str(tmp_path / "out.png"), "--bins", "0"]) == 1


def test_missing_positional_arguments():
    with pytest.raises(SystemExit):
        main(["image.png"])


@pytest.mark.parametrize("name", ["missing/out.png", "missing/out.fbmask", "out.unknown-extension"])
def test_unwritable_output(tmp_path, inputs, capsys, name):
    assert main(list(inputs) + [str(tmp_path / name), "--bins", "8"]) == 1
    assert "error:" in capsys.readouterr().err


def test_unwritable_masked_output(tmp_path, inputs, capsys):
    masked = str(tmp_path / "missing" / "masked.png")
    assert main(list(inputs) + [str(tmp_path / "out.png"), "--bins", "8", "--masked-output", masked]) == 1
    assert "error:" in capsys.readouterr().err
