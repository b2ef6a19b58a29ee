"""
    Ensures DUNEsim transfer spectra combine field and electronics responses.
"""
import numpy as np
import pytest
from dunesim.detsim.convolution import (
    ResponseConvolver,
    convolute_responses,
    delta_kernel,
)
from dunesim.detsim.electronics_response import ElectronicsResponseModel
from dunesim.detsim.fft import FFTEngine
from dunesim.detsim.field_response import FieldResponseModel
from dunesim.detsim.settings import DetSimSettings


def brute_force_convolution(electronics, field, nb_field_bins, nb_ticks):
    shape = np.zeros(nb_ticks)
    mxbin = min(nb_ticks, len(electronics) + nb_field_bins)
    for i in range(1, mxbin):
        total = 0.0
        for j in range(nb_field_bins):
            k = i - j
            if k == 0:
                break
            if k < len(electronics):
                total += electronics[k] * field[j]
        shape[i] = total
    return shape


@pytest.mark.parametrize("nb_ticks", [16, 64, 128])
def test_convolute_responses(nb_ticks):
    rng = np.random.default_rng(2)
    electronics = rng.uniform(size=20)
    field = np.zeros(nb_ticks)
    field[:9] = rng.normal(size=9)
    shape = convolute_responses(electronics, field, 12, nb_ticks)
    expected = brute_force_convolution(electronics, field, 12, nb_ticks)
    np.testing.assert_allclose(shape, expected, atol=1e-12)
    assert shape[0] == 0
    assert np.all(shape[min(nb_ticks, 32) :] == 0)


def test_convolute_empty_electronics():
    shape = convolute_responses(np.zeros(0), np.ones(8), 4, 8)
    np.testing.assert_equal(shape, np.zeros(8))


def test_delta_kernel():
    np.testing.assert_equal(delta_kernel(4), [1.0, 0.0, 0.0, 1.0])


def build_spectra(nb_ticks=1024):
    settings = DetSimSettings(nb_ticks=nb_ticks)
    fft = FFTEngine(nb_ticks)
    fields = FieldResponseModel(settings, 0.4763).responses()
    electronics = ElectronicsResponseModel(settings).response()
    convolver = ResponseConvolver(fft, settings.field_bins)
    return fft, convolver, fields, electronics


def test_transfer_spectra():
    fft, convolver, fields, electronics = build_spectra()
    spectra = convolver.transfer_spectra(fields, electronics)
    assert sorted(spectra) == ["collection", "induction"]
    for spectrum in spectra.values():
        assert spectrum.shape == (fft.freq_size,)
        assert not spectrum.flags.writeable

    shapes = convolver.time_shapes(fields, electronics)
    for signal_type, spectrum in spectra.items():
        aligned = fft.inverse(spectrum)
        # the shape is only moved in time
        np.testing.assert_allclose(
            np.abs(spectrum[:-1]),
            np.abs(fft.forward(shapes[signal_type])[:-1]),
            atol=1e-9,
        )
        # the peak sits half a tick before the window start
        distance = min(np.argmax(aligned) + 0.5, fft.size - 0.5 - np.argmax(aligned))
        assert distance <= 1.5


def test_collection_shape_area():
    fft, convolver, fields, electronics = build_spectra()
    shapes = convolver.time_shapes(fields, electronics)
    # the ramp sums to its amplitude, the induction lobes cancel
    field_area = fields["collection"].response.sum()
    expected = field_area * electronics.response[1:].sum()
    assert shapes["collection"].sum() == pytest.approx(expected, rel=1e-9)
    assert abs(shapes["induction"].sum()) < 1e-6 * np.abs(shapes["induction"]).sum() + 1e-9
