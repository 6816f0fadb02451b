import numpy as np
import pytest
from bgmodel.contracts.core import PixelClass, ThresholdSet
from bgmodel.services.classifier import DECISION_RULES, DEFAULT_LABEL, DecisionRule, decide, decide_pixel, is_shadow

T = ThresholdSet(cdist=2.0, bdist_lower=-1.0, bdist_upper=1.0)

def test_rules_order_is_priority():
    assert [r.label for r in DECISION_RULES] == [PixelClass.BACKGROUND, PixelClass.SHADOW, PixelClass.FOREGROUND]
    assert DEFAULT_LABEL is PixelClass.HIGHLIGHT

@pytest.mark.parametrize("bn,cn,expected", [
    (0.0, 0.0, PixelClass.BACKGROUND),
    (1.0, 0.0, PixelClass.BACKGROUND),     # bordes inclusivos
    (0.0, 2.0, PixelClass.BACKGROUND),
    (-5.0, 0.0, PixelClass.SHADOW),
    (5.0, 0.0, PixelClass.HIGHLIGHT),
    (0.0, 2.5, PixelClass.FOREGROUND),
    (-5.0, 9.0, PixelClass.FOREGROUND),   # FG gana sobre sombra
])
def test_single_pixel_decision(bn, cn, expected):
    assert decide_pixel(bn, cn, T) is expected

def test_in_band_negative_bn_is_shadow():
    # bn < 0 dentro de la banda: SHADOW sobrescribe a BACKGROUND
    assert decide_pixel(-0.5, 0.0, T) is PixelClass.SHADOW

def test_zero_width_band():
    t = ThresholdSet(cdist=0.0, bdist_lower=0.0, bdist_upper=0.0)
    assert decide_pixel(0.0, 0.0, t) is PixelClass.BACKGROUND
    assert decide_pixel(1e-12, 0.0, t) is PixelClass.HIGHLIGHT
    assert decide_pixel(0.0, 1e-12, t) is PixelClass.FOREGROUND

def test_monotonic_in_chromaticity():
    bn = np.zeros(50)
    cn = np.linspace(0.0, 5.0, 50)
    labels = decide(bn, cn, T)
    fg = labels == int(PixelClass.FOREGROUND)
    first = int(np.argmax(fg))
    assert fg[first:].all() and not fg[:first].any()

def test_vectorized_shape_and_dtype():
    labels = decide(np.zeros((3, 4)), np.zeros((3, 4)), T)
    assert labels.shape == (3, 4) and labels.dtype == np.uint8
    with pytest.raises(ValueError):
        decide(np.zeros(3), np.zeros(4), T)

def test_custom_rule_table():
    rules = (DecisionRule(PixelClass.SHADOW, is_shadow),)
    labels = decide(np.array([-1.0, 0.0]), np.zeros(2), T, rules=rules)
    assert labels.tolist() == [int(PixelClass.SHADOW), int(PixelClass.HIGHLIGHT)]
