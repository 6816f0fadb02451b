# tests/integration/adapters/test_pillow_io.py
import numpy as np
from pathlib import Path
from PIL import Image
from bgmodel.adapters.pillow_image_reader import PillowImageReader
from bgmodel.adapters.pillow_image_writer import PillowImageWriter
from bgmodel.contracts.core import PixelClass
from bgmodel.contracts.images import ClassificationMap
from tests.factories import make_noisy_image

def test_color_png_roundtrip(tmp_path: Path):
    img = make_noisy_image(7, 9)
    path = PillowImageWriter().write(tmp_path / "sub" / "img.png", img)
    assert Path(path).is_file()
    back = PillowImageReader().read(path)
    assert np.array_equal(back.data, img.data)

def test_grayscale_and_rgba_are_read_as_rgb(tmp_path: Path):
    Image.fromarray(np.full((3, 4), 77, dtype=np.uint8)).save(tmp_path / "g.png")
    Image.fromarray(np.full((3, 4, 4), 200, dtype=np.uint8)).save(tmp_path / "a.png")
    reader = PillowImageReader()
    g = reader.read(tmp_path / "g.png")
    assert g.data.shape == (3, 4, 3) and g.pixel(0, 0) == (77, 77, 77)
    assert reader.read(tmp_path / "a.png").pixel(2, 3) == (200, 200, 200)

def test_mask_nonzero_selects(tmp_path: Path):
    arr = np.zeros((4, 4), dtype=np.uint8)
    arr[1, 1] = 1
    arr[2, 3] = 255
    Image.fromarray(arr).save(tmp_path / "m.png")
    mask = PillowImageReader().read_mask(tmp_path / "m.png")
    assert mask.count == 2 and bool(mask.data[2, 3])

def test_labels_are_stored_raw(tmp_path: Path):
    labels = np.array([[1, 2], [3, 4]], dtype=np.uint8)
    path = PillowImageWriter().write_labels(tmp_path / "labels.png", ClassificationMap(labels))
    with Image.open(path) as im:
        back = np.asarray(im)
    assert np.array_equal(back, labels)
    assert ClassificationMap(back).label_at(1, 1) is PixelClass.FOREGROUND
