import pytest
from pydantic import ValidationError
from bgmodel.contracts.core import (
    DEFAULT_CLASS_LABELS, PIXEL_CODES, ClassLabel, ModelMode, PixelClass, RGB8, ThresholdSet, TrainingMeta,
)

def test_pixel_codes_are_one_byte_and_fixed():
    assert PIXEL_CODES == (1, 2, 3, 4)
    assert PixelClass.BACKGROUND == 1 and PixelClass.FOREGROUND == 4

def test_rgb8_and_label():
    col = RGB8(r=10, g=20, b=30)
    lab = ClassLabel(code=PixelClass.SHADOW, name=" sombra ", color=col)
    assert lab.color.as_tuple() == (10, 20, 30)
    assert lab.name == "sombra"

@pytest.mark.parametrize("bad", [-1, 256])
def test_rgb8_range(bad):
    with pytest.raises(ValidationError):
        RGB8(r=bad)

def test_label_name_non_empty():
    with pytest.raises(ValidationError):
        ClassLabel(code=PixelClass.SHADOW, name="   ")

def test_default_palette_matches_legend():
    pal = {c.code: c.color.as_tuple() for c in DEFAULT_CLASS_LABELS}
    assert pal[PixelClass.FOREGROUND] == (0, 0, 255)    # azul
    assert pal[PixelClass.BACKGROUND] == (0, 255, 0)    # verde
    assert pal[PixelClass.SHADOW] == (255, 0, 0)        # rojo
    assert pal[PixelClass.HIGHLIGHT] == (0, 0, 0)       # negro

def test_threshold_set_is_frozen():
    t = ThresholdSet(cdist=2.0, bdist_lower=-1.0, bdist_upper=1.5)
    assert t.as_tuple() == (2.0, -1.0, 1.5)
    with pytest.raises(ValidationError):
        t.cdist = 3.0

def test_training_meta_duration():
    m = TrainingMeta(mode=ModelMode.SPATIAL, detection_rate=0.9)
    assert m.duration_s is None
    done = m.end_now()
    assert done.duration_s is not None and done.duration_s >= 0.0
    assert m.ended_at is None
