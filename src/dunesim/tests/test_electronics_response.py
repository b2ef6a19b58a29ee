"""
    Ensures DUNEsim electronics response is trimmed around its peak.
"""
import numpy as np
import pytest
from dunesim.detsim.electronics_response import (
    TRIM_FRACTION,
    ElectronicsResponseModel,
    retained_region,
    shaping_norm,
    shaping_pulse,
)
from dunesim.detsim.exceptions import ConfigurationError
from dunesim.detsim.settings import DetSimSettings

TIME_CONSTS = [(3000.0, 900.0), (2000.0, 500.0), (1500.0, 1000.0), (5000.0, 300.0)]


@pytest.mark.parametrize("time_consts", TIME_CONSTS)
def test_retained_region_above_threshold(time_consts):
    settings = DetSimSettings(shape_time_const=time_consts, nb_ticks=4096)
    electronics = ElectronicsResponseModel(settings).response()
    response = electronics.response

    assert 0 < electronics.nb_samples <= settings.nb_ticks
    assert np.all(response >= TRIM_FRACTION * electronics.peak)
    assert response.max() == electronics.peak

    # peak is interior
    argpeak = np.argmax(response)
    assert 0 < argpeak < electronics.nb_samples - 1


@pytest.mark.parametrize("time_consts", TIME_CONSTS)
def test_retained_region_is_contiguous_slice(time_consts):
    settings = DetSimSettings(shape_time_const=time_consts, nb_ticks=4096)
    electronics = ElectronicsResponseModel(settings).response()
    pulse = shaping_pulse(time_consts, settings.sample_period, settings.nb_ticks)
    stop = electronics.start + electronics.nb_samples
    np.testing.assert_equal(electronics.response, pulse[electronics.start : stop])
    # neighbours outside the retained region are below threshold
    threshold = TRIM_FRACTION * electronics.peak
    assert pulse[electronics.start - 1] < threshold
    assert pulse[stop] < threshold


def test_pulse_is_finite_on_long_windows():
    pulse = shaping_pulse((3000.0, 900.0), 500.0, 16384)
    assert np.all(np.isfinite(pulse))
    assert np.all(pulse >= 0)


def test_retained_region():
    response = np.array([0.0, 0.001, 1.0, 5.0, 2.0, 0.001])
    assert retained_region(response, 0.05) == (2, 5)
    # nothing above threshold
    assert retained_region(np.zeros(4), 1.0) == (0, 0)
    assert retained_region(np.full(6, 0.5), 1.0) == (0, 0)


def test_shaping_norm():
    fast, slow = 3000.0, 900.0
    expected = slow * np.pi * 500.0 / np.sin(slow * np.pi / fast)
    np.testing.assert_allclose(shaping_norm((fast, slow), 500.0), expected)


@pytest.mark.parametrize(
    "time_consts",
    [(900.0, 900.0), (1000.0, 2000.0), (1000.0, 1500.0), (1000.0, 2500.0), (1000.0, 3500.0)],
)
def test_undefined_norm(time_consts):
    with pytest.raises(ConfigurationError):
        shaping_norm(time_consts, 500.0)
    settings = DetSimSettings(shape_time_const=time_consts)
    with pytest.raises(ConfigurationError):
        ElectronicsResponseModel(settings).response()
