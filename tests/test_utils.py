from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from pixit.utils import (
    create_necessary_directory,
    default_output_directory_name,
    iterate_all_image_paths,
    load_image,
    output_image_path,
    remove_directory_if_empty,
    save_image,
)


def test_iterate_all_image_paths_filters_formats(tmp_path) -> None:
    for name in ["b.png", "a.JPG", "c.jpeg", "notes.txt", "d.gif"]:
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "nested.png").mkdir()

    paths = iterate_all_image_paths(str(tmp_path))

    assert [path.name for path in paths] == ["a.JPG", "b.png", "c.jpeg"]


def test_iterate_all_image_paths_missing_directory(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        iterate_all_image_paths(tmp_path / "nope")


def test_load_image_converts_to_rgba(tmp_path) -> None:
    path = tmp_path / "rgb.jpg"
    Image.new("RGB", (5, 3), (200, 10, 10)).save(path)

    image = load_image(path)

    assert image.shape == (3, 5, 4)
    assert image.dtype == np.uint8
    assert (image[..., 3] == 255).all()


def test_save_image_writes_rgba_png(tmp_path) -> None:
    image = np.zeros((2, 3, 4), dtype=np.uint8)
    image[:, :] = (10, 20, 30, 255)
    image[0, 0] = (250, 0, 0, 255)

    path = save_image(image, tmp_path / "out.jpg")

    assert path == tmp_path / "out.png"
    with Image.open(path) as written:
        assert written.mode == "RGBA"
        assert written.size == (3, 2)
        assert written.getpixel((0, 0)) == (250, 0, 0, 255)
        assert written.getpixel((2, 1)) == (10, 20, 30, 255)
    assert (load_image(path) == image).all()


def test_save_image_refuses_empty_image(tmp_path) -> None:
    with pytest.raises(ValueError):
        save_image(np.zeros((0, 0, 4), dtype=np.uint8), tmp_path / "out.png")


def test_output_naming() -> None:
    assert output_image_path(Path("in/photo.holiday.jpg"), Path("out")) == Path("out/photo.holiday.png")
    assert default_output_directory_name(None, 42) == "pixit-default-42"
    assert default_output_directory_name("endesga-32.hex", 42) == "pixit-endesga-32-42"


def test_directory_helpers(tmp_path) -> None:
    directory = tmp_path / "a" / "b"
    create_necessary_directory(directory)
    assert directory.is_dir()

    (directory / "kept.png").write_bytes(b"")
    assert not remove_directory_if_empty(directory)
    (directory / "kept.png").unlink()
    assert remove_directory_if_empty(directory)
    assert not directory.exists()
