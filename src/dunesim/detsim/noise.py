"""
    This module contains the bank of pre-generated noise waveforms.

    Each waveform is white noise shaped in frequency space by an exponential
    envelope and a sigmoid low frequency filter, with random amplitude jitter
    and random phases, then transformed back to time.
"""
import logging
from typing import Optional, Sequence
import numpy as np
from scipy.special import expit
from dunesim.configsim import PACKAGE
from .fft import FFTEngine
from .rng import RandomSource
from .settings import DetSimSettings

logger = logging.getLogger(PACKAGE + ".noise")


def frequency_bin_width(nb_ticks: int, sample_period: float) -> float:
    """Width of a frequency bin [kHz], for a sample period in ns."""
    return 1.0 / (nb_ticks * sample_period * 1.0e-6)


def noise_spectrum(
    rnd: np.ndarray,
    nb_ticks: int,
    sample_period: float,
    noise_fact: float,
    noise_width: float,
    low_cutoff: float,
    steepness: float = 0.5,
    jitter: float = 0.1,
) -> np.ndarray:
    """Random noise spectrum.

    Parameters
    ----------
    rnd: np.ndarray
        Uniform draws, of shape=(nb_ticks // 2 + 1, 2). The first column
        jitters the amplitude, the second sets the phase.
    nb_ticks: int
        Number of time ticks.
    sample_period: float
        Sample period [ns].
    noise_fact: float
        Noise scale factor.
    noise_width: float
        Exponential envelope width [kHz].
    low_cutoff: float
        Low frequency filter cutoff [kHz].
    steepness: float
        Low frequency filter sigmoid width [bins].
    jitter: float
        Relative amplitude randomization, amplitudes vary in
        ``[1 - jitter, 1 + jitter)``.

    Returns
    -------
    np.ndarray
        The complex spectrum, of shape=(nb_ticks // 2 + 1,).
    """
    bin_width = frequency_bin_width(nb_ticks, sample_period)
    freq = np.arange(nb_ticks // 2 + 1)
    pval = noise_fact * np.exp(-freq * bin_width / noise_width)
    # suppresses bins below the cutoff
    lofilter = expit((freq - low_cutoff / bin_width) / steepness)
    pval = pval * lofilter * (1.0 - jitter + 2.0 * jitter * rnd[:, 0])
    phase = rnd[:, 1] * 2.0 * np.pi
    return pval * np.cos(phase) + 1j * pval * np.sin(phase)


class NoiseBank:
    """Fixed pool of noise waveforms, read-only once built.

    Example
    -------

    >>> import numpy as np
    >>> from dunesim.detsim.noise import NoiseBank
    >>> bank = NoiseBank(np.zeros((2, 8)))
    >>> len(bank), bank.nb_ticks
    (2, 8)
    """

    def __init__(self, waveforms: np.ndarray, nb_ticks: Optional[int] = None):
        """
        Parameters
        ----------
        waveforms: np.ndarray
            The noise waveforms, of shape=(nb slots, nb ticks).
        nb_ticks: int
            Waveform length, needed only for an empty bank.
        """
        waveforms = np.array(waveforms, dtype=float)
        if waveforms.size == 0 and waveforms.ndim != 2:
            waveforms = waveforms.reshape(0, nb_ticks or 0)
        if waveforms.ndim != 2:
            raise ValueError(
                f"Noise waveforms must have shape (nb slots, nb ticks), got {waveforms.shape}"
            )
        waveforms.setflags(write=False)
        self.waveforms = waveforms
        self.nb_ticks = waveforms.shape[1] if nb_ticks is None else nb_ticks

    def __len__(self) -> int:
        return len(self.waveforms)

    def __getitem__(self, slot: int) -> np.ndarray:
        """Noise waveform of ``slot``. An empty bank gives the zero waveform."""
        if len(self) == 0:
            return np.zeros(self.nb_ticks)
        return self.waveforms[slot]

    def select_slot(self, r: float) -> int:
        """Maps a uniform draw to a slot index.

        Uses ``round(r * (nb slots - 1 + 0.1))`` clamped to the valid range.
        """
        if len(self) == 0:
            return 0
        slot = int(np.rint(r * (len(self) - 1 + 0.1)))
        return min(max(slot, 0), len(self) - 1)

    def distribution(self, bins: int = 1000, value_range: Sequence[float] = (-10.0, 10.0)):
        """Histogram of all noise samples.

        Returns
        -------
        tuple
            ``(counts, edges)``, as returned by ``np.histogram``.
        """
        return np.histogram(self.waveforms, bins=bins, range=tuple(value_range))

    @classmethod
    def generate(
        cls,
        settings: DetSimSettings,
        random_source: RandomSource,
        fft: Optional[FFTEngine] = None,
        nb_slots: Optional[int] = None,
    ) -> "NoiseBank":
        """Generates the noise bank.

        Slots are generated in order, each consuming ``2 * (nb_ticks // 2 + 1)``
        draws, two per frequency bin.

        Parameters
        ----------
        settings: DetSimSettings
            The simulation settings.
        random_source: RandomSource
            The uniform random source.
        fft: FFTEngine
            The transform engine. If None, a new one is created.
        nb_slots: int
            Number of waveforms, defaults to ``settings.nb_noise_channels``.

        Returns
        -------
        NoiseBank
            The generated bank.
        """
        fft = fft or FFTEngine(settings.nb_ticks)
        nb_slots = settings.nb_noise_channels if nb_slots is None else nb_slots
        waveforms = np.zeros((nb_slots, fft.size))
        for slot in range(nb_slots):
            rnd = random_source.flat_array((fft.freq_size, 2))
            spectrum = noise_spectrum(
                rnd,
                fft.size,
                settings.sample_period,
                settings.noise_fact,
                settings.noise_width,
                settings.low_cutoff,
                settings.lofilter_steepness,
                settings.noise_jitter,
            )
            # the inverse transform divides by the size
            waveforms[slot] = fft.inverse(spectrum) * fft.size
        logger.info(f"Generated {nb_slots} noise waveforms of {fft.size} ticks")
        return cls(waveforms, fft.size)
