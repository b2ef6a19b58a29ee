"""
    This module contains the combination of field and electronics responses
    into one transfer function per plane type.
"""
import logging
from typing import Dict
import numpy as np
from dunesim.configsim import PACKAGE
from .electronics_response import ElectronicsResponse
from .fft import FFTEngine
from .field_response import FieldResponse

logger = logging.getLogger(PACKAGE + ".detsim")


def delta_kernel(nb_ticks: int) -> np.ndarray:
    """Two point kernel, centered half a tick before the window start."""
    delta = np.zeros(nb_ticks)
    delta[0] = 1.0
    delta[nb_ticks - 1] = 1.0
    return delta


def convolute_responses(
    electronics: np.ndarray, field: np.ndarray, nb_field_bins: int, nb_ticks: int
) -> np.ndarray:
    """Causal time convolution of electronics and field responses.

    Output tick ``i`` in ``[1, min(nb_ticks, nb electronics + nb_field_bins))``
    sums ``electronics[i - j] * field[j]`` over ``j < nb_field_bins`` with
    ``i - j >= 1``. The remaining ticks are zero.

    Parameters
    ----------
    electronics: np.ndarray
        The trimmed electronics response, of shape=(nb electronics,).
    field: np.ndarray
        The field response, of shape=(nb ticks,).
    nb_field_bins: int
        Number of field response bins entering the sum.
    nb_ticks: int
        Output length.

    Returns
    -------
    np.ndarray
        The convolved shape, of shape=(nb_ticks,).
    """
    shape = np.zeros(nb_ticks)
    mxbin = min(nb_ticks, len(electronics) + nb_field_bins)
    if mxbin <= 1 or len(electronics) == 0:
        return shape

    # electronics[0] never enters the sum
    causal = np.array(electronics, dtype=float)
    causal[0] = 0.0
    full = np.convolve(causal, field[:nb_field_bins])
    stop = min(mxbin, len(full))
    shape[1:stop] = full[1:stop]
    return shape


class ResponseConvolver:
    """Combines field and electronics responses into transfer spectra.

    The combined time shapes are aligned against a two point delta kernel and
    transformed to frequency space. Multiplying a charge spectrum by the
    transfer spectrum convolves the charge with the full response.
    """

    def __init__(self, fft: FFTEngine, nb_field_bins: int):
        """
        Parameters
        ----------
        fft: FFTEngine
            The transform engine, its size sets the number of ticks.
        nb_field_bins: int
            Number of field response bins entering the convolution.
        """
        self.fft = fft
        self.nb_field_bins = nb_field_bins

    def time_shapes(
        self, field_responses: Dict[str, FieldResponse], electronics: ElectronicsResponse
    ) -> Dict[str, np.ndarray]:
        """Convolved field x electronics shapes, keyed by signal type."""
        return {
            signal_type: convolute_responses(
                electronics.response,
                field.response,
                self.nb_field_bins,
                self.fft.size,
            )
            for signal_type, field in field_responses.items()
        }

    def transfer_spectra(
        self, field_responses: Dict[str, FieldResponse], electronics: ElectronicsResponse
    ) -> Dict[str, np.ndarray]:
        """Transfer spectra, of shape=(nb ticks // 2 + 1,), keyed by signal type.

        The returned arrays are read-only.
        """
        delta = delta_kernel(self.fft.size)
        spectra = {}
        for signal_type, shape in self.time_shapes(field_responses, electronics).items():
            aligned = self.fft.aligned_sum(shape, delta, add=False)
            spectrum = self.fft.forward(aligned)
            spectrum.setflags(write=False)
            spectra[signal_type] = spectrum
        logger.info(f"Computed transfer spectra for {sorted(spectra)} planes")
        return spectra
