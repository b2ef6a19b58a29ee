"""
    This module contains the per channel synthesis of the digitized signal.
"""
from concurrent.futures import ThreadPoolExecutor
import logging
from typing import List, Mapping, Optional
import numpy as np
from dunesim.configsim import PACKAGE
from dunesim.geometry.helpers import Geometry, SIGNAL_TYPES
from dunesim.utils.utils import check, get_nb_cpu_cores
from .compression import ADC_DTYPE
from .exceptions import PreconditionError
from .fft import FFTEngine
from .noise import NoiseBank
from .rawdigit import RawWaveform
from .rng import RandomSource

logger = logging.getLogger(PACKAGE + ".detsim")

ADC_MIN = np.iinfo(ADC_DTYPE).min
ADC_MAX = np.iinfo(ADC_DTYPE).max


def quantize(waveform: np.ndarray) -> np.ndarray:
    """Rounds to the nearest integer, saturating at the int16 range."""
    return np.clip(np.rint(waveform), ADC_MIN, ADC_MAX).astype(ADC_DTYPE)


def fit_readout(adcs: np.ndarray, nb_samples: int) -> np.ndarray:
    """Truncates or zero pads ``adcs`` to ``nb_samples``."""
    readout = np.zeros(nb_samples, dtype=adcs.dtype)
    nb_kept = min(nb_samples, len(adcs))
    readout[:nb_kept] = adcs[:nb_kept]
    return readout


class SignalSynthesizer:
    """Turns the charge collected by each channel into raw waveforms.

    Each channel charge is convolved with the transfer spectrum of its plane
    type, a noise waveform drawn from the bank is added coherently on all the
    channel ticks, the sum is quantized, fit to the readout length and
    compressed.

    Example
    -------

    >>> import numpy as np
    >>> from dunesim.detsim.fft import FFTEngine
    >>> from dunesim.detsim.noise import NoiseBank
    >>> from dunesim.detsim.rng import RandomSource
    >>> from dunesim.detsim.synthesis import SignalSynthesizer
    >>> fft = FFTEngine(8)
    >>> identity = fft.forward(np.eye(8)[0])
    >>> synthesizer = SignalSynthesizer(
    ...     {"collection": identity, "induction": identity},
    ...     NoiseBank(np.zeros((1, 8))),
    ...     RandomSource(seed=0),
    ...     nb_readout_samples=8,
    ...     fft=fft,
    ... )
    >>> charge = np.array([0, 0, 5, 5, 0, 0, 0, 0])
    >>> synthesizer.synthesize_channel(0, "collection", charge).uncompressed()
    array([0, 0, 5, 5, 0, 0, 0, 0], dtype=int16)
    """

    def __init__(
        self,
        transfer_spectra: Mapping[str, np.ndarray],
        noise_bank: NoiseBank,
        random_source: RandomSource,
        nb_readout_samples: int,
        compression: str = "none",
        fft: Optional[FFTEngine] = None,
        nb_workers: int = 1,
    ):
        """
        Parameters
        ----------
        transfer_spectra: Mapping[str, np.ndarray]
            Transfer spectra keyed by signal type, of shape=(nb ticks // 2 + 1,).
        noise_bank: NoiseBank
            The pre-generated noise waveforms.
        random_source: RandomSource
            Source of the noise slot draws.
        nb_readout_samples: int
            Length of the emitted adc sequences.
        compression: str
            Available options: none | rle.
        fft: FFTEngine
            The transform engine. If None, it is sized after the noise bank.
        nb_workers: int
            Number of threads synthesizing channels, -1 uses all cpu cores.
        """
        check(compression, ["none", "rle"])
        for signal_type in SIGNAL_TYPES:
            if signal_type not in transfer_spectra:
                raise KeyError(f"Missing transfer spectrum for {signal_type} plane")
        self.fft = fft or FFTEngine(noise_bank.nb_ticks)
        if noise_bank.nb_ticks != self.fft.size:
            raise ValueError(
                f"Noise waveforms have {noise_bank.nb_ticks} ticks, "
                f"transform size is {self.fft.size}"
            )
        self.transfer_spectra = dict(transfer_spectra)
        self.noise_bank = noise_bank
        self.random_source = random_source
        self.nb_readout_samples = nb_readout_samples
        self.compression = compression
        self.nb_workers = get_nb_cpu_cores() if nb_workers == -1 else nb_workers

    @property
    def nb_ticks(self) -> int:
        return self.fft.size

    def convolve_charge(self, charge: Optional[np.ndarray], signal_type: str) -> np.ndarray:
        """Convolves the charge series with the plane transfer spectrum.

        Parameters
        ----------
        charge: np.ndarray
            The charge per tick, of shape=(nb ticks,) at most. Shorter series
            are zero padded, None means no charge.
        signal_type: str
            Available options: induction | collection.

        Returns
        -------
        np.ndarray
            The signal, of shape=(nb ticks,).

        Raises
        ------
        PreconditionError
            If the charge series is not 1D or is longer than the tick count.
        """
        check(signal_type, SIGNAL_TYPES)
        if charge is None:
            return np.zeros(self.nb_ticks)
        charge = np.asarray(charge, dtype=float)
        if charge.ndim != 1 or len(charge) > self.nb_ticks:
            raise PreconditionError(
                f"Charge series of shape {charge.shape} does not fit {self.nb_ticks} ticks"
            )
        padded = np.zeros(self.nb_ticks)
        padded[: len(charge)] = charge
        return self.fft.convolute(padded, self.transfer_spectra[signal_type])

    def draw_noise_slot(self) -> int:
        """Draws the noise waveform index for one channel."""
        return self.noise_bank.select_slot(self.random_source.flat())

    def synthesize_channel(
        self,
        channel: int,
        signal_type: str,
        charge: Optional[np.ndarray] = None,
        noise_slot: Optional[int] = None,
    ) -> RawWaveform:
        """Synthesizes the raw waveform of one channel.

        Parameters
        ----------
        channel: int
            The channel number.
        signal_type: str
            Available options: induction | collection.
        charge: np.ndarray
            The charge per tick, None if the channel collected nothing.
        noise_slot: int
            The noise waveform index. If None, it is drawn from the random
            source.

        Returns
        -------
        RawWaveform
            The channel digitized waveform.
        """
        if noise_slot is None:
            noise_slot = self.draw_noise_slot()
        signal = self.convolve_charge(charge, signal_type)
        adcs = quantize(signal + self.noise_bank[noise_slot])
        adcs = fit_readout(adcs, self.nb_readout_samples)
        return RawWaveform.from_adcs(channel, adcs, self.compression)

    def process_event(
        self, charges: Mapping[int, np.ndarray], geometry: Geometry
    ) -> List[RawWaveform]:
        """Synthesizes the raw waveforms of all the detector channels.

        Noise slots are drawn for every channel in ascending channel order
        before any synthesis, so the output does not depend on the number of
        workers.

        Parameters
        ----------
        charges: Mapping[int, np.ndarray]
            Charge series keyed by channel number. Missing channels collected
            no charge.
        geometry: Geometry
            The detector channel map.

        Returns
        -------
        List[RawWaveform]
            The raw waveforms, in ascending channel order.

        Raises
        ------
        PreconditionError
            If a charge series refers to a channel outside the detector.
        """
        nb_channels = geometry.nb_channels
        for channel in charges:
            if not 0 <= channel < nb_channels:
                raise PreconditionError(
                    f"Charge on channel {channel}, detector has {nb_channels} channels"
                )

        slots = [self.draw_noise_slot() for _ in range(nb_channels)]

        def run(channel: int) -> RawWaveform:
            return self.synthesize_channel(
                channel,
                geometry.signal_types[channel],
                charges.get(channel),
                slots[channel],
            )

        logger.debug(f"Synthesizing {nb_channels} channels, {len(charges)} with charge")
        if self.nb_workers > 1:
            with ThreadPoolExecutor(max_workers=self.nb_workers) as executor:
                return list(executor.map(run, range(nb_channels)))
        return [run(channel) for channel in range(nb_channels)]

