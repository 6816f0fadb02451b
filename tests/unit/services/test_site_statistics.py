import numpy as np
import pytest
from bgmodel.contracts.core import ModelMode
from bgmodel.contracts.corpus import SpatialCorpus, TemporalCorpus
from bgmodel.contracts.errors import DimensionMismatch
from bgmodel.ports.site_lookup import SiteLookupPort
from bgmodel.services.site_statistics import (
    SpatialSiteStatistics, TemporalSiteStatistics, brightness_denominator, clamp_stddev,
    estimate_site_statistics,
)
from tests.factories import make_frames, make_full_mask, make_image, make_noisy_frames, make_noisy_image

def test_uniform_gray_spatial_stats_are_clamped():
    s = estimate_site_statistics(SpatialCorpus(image=make_image(), mask=make_full_mask()))
    assert isinstance(s, SpatialSiteStatistics)
    assert s.mean_at(0, 0) == (128.0, 128.0, 128.0)
    assert s.stddev_at(3, 5) == (1.0, 1.0, 1.0)
    assert s.denominator_at(0, 0) == pytest.approx(3 * 128.0 ** 2)
    w = s.brightness_weight_at(0, 0)
    assert w == pytest.approx((128.0 / (3 * 128.0 ** 2),) * 3)

def test_spatial_stats_ignore_unselected_pixels():
    arr = np.zeros((2, 2, 3), dtype=np.uint8)
    arr[0, 0] = (10, 20, 30)
    arr[0, 1] = (30, 40, 50)
    arr[1, :] = 255
    mask = np.array([[1, 1], [0, 0]], dtype=bool)
    s = estimate_site_statistics(SpatialCorpus(image=arr, mask=mask))
    assert s.mean_at(1, 1) == pytest.approx((20.0, 30.0, 40.0))
    # desviación poblacional (divide por M)
    assert s.stddev_at(0, 0) == pytest.approx((10.0, 10.0, 10.0))

def test_spatial_stats_same_values_for_any_coordinate_and_shape():
    s = estimate_site_statistics(SpatialCorpus(image=make_noisy_image(), mask=np.ones((24, 32), bool)))
    assert s.mean_at(0, 0) == s.mean_at(1000, 2000)
    mean, std, num, denom = s.fields_for((3, 3))
    assert mean.shape == (3,) and np.ndim(denom) == 0

def test_empty_mask_gives_zero_mean_and_unit_stats():
    img = make_noisy_image(6, 6)
    s = estimate_site_statistics(SpatialCorpus(image=img, mask=np.zeros((6, 6), bool)))
    assert s.mean_at(0, 0) == (0.0, 0.0, 0.0)
    assert s.stddev_at(0, 0) == (1.0, 1.0, 1.0)
    assert s.denom == 1.0

def test_temporal_varying_site_has_stddev_above_one():
    s = estimate_site_statistics(TemporalCorpus.of(make_frames(3, 4, 5, site=(1, 2))))
    assert isinstance(s, TemporalSiteStatistics)
    assert s.mode is ModelMode.TEMPORAL
    assert all(v > 1.0 for v in s.stddev_at(1, 2))
    std = s.stddev.copy()
    std[1, 2] = 1.0
    assert np.all(std == 1.0)
    assert s.mean_at(0, 0) == (50.0, 60.0, 70.0)

def test_temporal_weight_matches_definition():
    s = estimate_site_statistics(TemporalCorpus.of(make_noisy_frames()))
    y, x = 3, 4
    mean, std = np.array(s.mean_at(y, x)), np.array(s.stddev_at(y, x))
    denom = np.sum((mean / std) ** 2)
    np.testing.assert_allclose(s.brightness_weight_at(y, x), mean / (denom * std ** 2))
    np.testing.assert_allclose(s.brightness_weight[y, x], mean / (denom * std ** 2))

def test_temporal_fields_require_exact_shape():
    s = estimate_site_statistics(TemporalCorpus.of(make_frames(3, 4, 5)))
    s.fields_for((4, 5))
    with pytest.raises(DimensionMismatch):
        s.fields_for((5, 4))

def test_both_variants_satisfy_lookup_port():
    sp = estimate_site_statistics(SpatialCorpus(image=make_image(), mask=make_full_mask()))
    tp = estimate_site_statistics(TemporalCorpus.of(make_frames()))
    assert isinstance(sp, SiteLookupPort)
    assert isinstance(tp, SiteLookupPort)

def test_statistics_are_strictly_positive_and_readonly():
    for corpus in (
        SpatialCorpus(image=make_noisy_image(), mask=np.ones((24, 32), bool)),
        TemporalCorpus.of(make_noisy_frames()),
        TemporalCorpus.of(make_frames()),
    ):
        s = estimate_site_statistics(corpus)
        assert np.all(s.stddev > 0)
        assert np.all(np.asarray(s.denom) > 0)
        with pytest.raises(ValueError):
            s.stddev[...] = 0

def test_clamp_helpers():
    np.testing.assert_array_equal(clamp_stddev(np.array([0.0, 2.5, 0.0])), [1.0, 2.5, 1.0])
    assert brightness_denominator(np.zeros(3), np.ones(3)) == 1.0
    assert brightness_denominator(np.array([3.0, 4.0, 0.0]), np.ones(3)) == 25.0
