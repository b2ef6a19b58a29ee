"""
    This module contains the response of the shaping amplifier.
"""
from dataclasses import dataclass
import logging
import numpy as np
from dunesim.configsim import PACKAGE
from .exceptions import ConfigurationError
from .settings import DetSimSettings

logger = logging.getLogger(PACKAGE + ".detsim")

DISPLAY_SCALE = 120000.0  # arbitrary scaling of the pulse height
TRIM_FRACTION = 0.01  # samples below this fraction of the peak are trimmed


@dataclass(frozen=True, eq=False)
class ElectronicsResponse:
    """Trimmed shaping pulse."""

    response: np.ndarray  # the retained region, of shape=(nb samples,)
    peak: float
    start: int  # first retained tick of the untrimmed pulse

    @property
    def nb_samples(self) -> int:
        return len(self.response)


def shaping_norm(time_consts, sample_period: float) -> float:
    """Normalization of the shaping pulse.

    Raises
    ------
    ConfigurationError
        If the time constants give a vanishing, negative or undefined norm,
        or a pulse whose area diverges.
    """
    fast, slow = time_consts
    # the pulse integral converges only for slow < fast
    if not 0 < slow < fast:
        raise ConfigurationError(
            f"Shaping time constants {time_consts} need 0 < slow < fast"
        )
    sine = np.sin(slow * np.pi / fast)
    norm = slow * np.pi / (sine / sample_period)
    if not np.isfinite(norm) or abs(sine) < 1e-12 or norm <= 0:
        raise ConfigurationError(
            f"Shaping time constants {time_consts} give an undefined pulse normalization"
        )
    return norm


def shaping_pulse(time_consts, sample_period: float, nb_ticks: int) -> np.ndarray:
    """Bipolar exponential pulse sampled on ``nb_ticks`` ticks.

    The pulse time is offset by a third of the window, so that the whole rise
    is sampled.
    """
    fast, slow = time_consts
    norm = shaping_norm(time_consts, sample_period)
    time = (np.arange(nb_ticks) - nb_ticks / 3.0) * sample_period
    # exp(-t / fast) / (1 + exp(-t / slow)), evaluated in log space
    log_pulse = -time / fast - np.logaddexp(0.0, -time / slow)
    return DISPLAY_SCALE * np.exp(log_pulse) / norm


def retained_region(response: np.ndarray, threshold: float):
    """Bounds of the region between the first and last samples at or above threshold.

    A response entirely below threshold gives the empty ``(0, 0)`` region.

    Returns
    -------
    tuple
        The ``(start, stop)`` slice bounds.
    """
    start, stop = 0, len(response)
    while start < stop and response[start] < threshold:
        start += 1
    while stop > start and response[stop - 1] < threshold:
        stop -= 1
    if start == stop:
        return 0, 0
    return start, stop


class ElectronicsResponseModel:
    """Builds the shaping amplifier response.

    Example
    -------

    >>> from dunesim.detsim.settings import DetSimSettings
    >>> from dunesim.detsim.electronics_response import ElectronicsResponseModel
    >>> electronics = ElectronicsResponseModel(DetSimSettings()).response()
    >>> electronics.nb_samples < DetSimSettings().nb_ticks
    True
    """

    def __init__(self, settings: DetSimSettings):
        self.settings = settings

    def response(self) -> ElectronicsResponse:
        """Computes the pulse and trims samples below 1% of the peak at both ends."""
        pulse = shaping_pulse(
            self.settings.shape_time_const,
            self.settings.sample_period,
            self.settings.nb_ticks,
        )
        peak = float(pulse.max())
        start, stop = retained_region(pulse, TRIM_FRACTION * peak)
        retained = pulse[start:stop].copy()

        argpeak = int(np.argmax(retained))
        if argpeak in (0, len(retained) - 1):
            logger.warning(
                "Electronics response peak lies at the window edge, "
                "consider a larger nb_ticks"
            )
        logger.info(f"Electronics response retains {len(retained)} samples")
        return ElectronicsResponse(retained, peak, start)
