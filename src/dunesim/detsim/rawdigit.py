"""
    This module contains the RawWaveform class, the digitized output of one
    channel, and its persistence.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List
import numpy as np
from .compression import ADC_DTYPE, compress, uncompress


@dataclass(frozen=True, eq=False)
class RawWaveform:
    """Digitized waveform of one channel.

    The ``adcs`` array is read-only and holds the encoded sequence produced by
    the ``compression`` scheme.
    """

    channel: int
    nb_samples: int  # readout length before compression
    adcs: np.ndarray
    compression: str = "none"

    def __post_init__(self):
        self.adcs.setflags(write=False)

    @classmethod
    def from_adcs(cls, channel: int, adcs: np.ndarray, compression: str = "none"):
        """Encodes a readout length adc sequence."""
        encoded = compress(adcs, compression)
        return cls(channel, len(adcs), encoded, compression)

    def uncompressed(self) -> np.ndarray:
        """The adc sequence, of shape=(nb_samples,).

        Raises
        ------
        ValueError
            If the decoded length does not match ``nb_samples``.
        """
        adcs = uncompress(self.adcs, self.compression)
        if len(adcs) != self.nb_samples:
            raise ValueError(
                f"Channel {self.channel}: decoded {len(adcs)} samples, "
                f"expected {self.nb_samples}"
            )
        return adcs


def waveforms2evt(waveforms: List[RawWaveform]) -> np.ndarray:
    """Stacks the uncompressed waveforms, of shape=(nb channels, nb samples)."""
    return np.stack([waveform.uncompressed() for waveform in waveforms])


def save_raw_waveforms(fname: Path, waveforms: List[RawWaveform]):
    """Saves an event of raw waveforms to a ``.npz`` archive.

    The encoded sequences are concatenated in the ``adcs`` array, the
    ``offsets`` array marks where each channel starts.

    Parameters
    ----------
    fname: Path
        The output file.
    waveforms: List[RawWaveform]
        The event raw waveforms.
    """
    lengths = [len(waveform.adcs) for waveform in waveforms]
    offsets = np.concatenate([[0], np.cumsum(lengths)]).astype(np.int64)
    adcs = (
        np.concatenate([waveform.adcs for waveform in waveforms])
        if waveforms
        else np.zeros(0, dtype=ADC_DTYPE)
    )
    np.savez(
        fname,
        channel=np.array([waveform.channel for waveform in waveforms], dtype=np.int64),
        nb_samples=np.array([waveform.nb_samples for waveform in waveforms], dtype=np.int64),
        compression=np.array([waveform.compression for waveform in waveforms], dtype=str),
        offsets=offsets,
        adcs=adcs.astype(ADC_DTYPE),
    )


def load_raw_waveforms(fname: Path) -> List[RawWaveform]:
    """Loads an event of raw waveforms saved by ``save_raw_waveforms``."""
    with np.load(fname) as archive:
        channels = archive["channel"]
        nb_samples = archive["nb_samples"]
        compressions = archive["compression"]
        offsets = archive["offsets"]
        adcs = archive["adcs"]
    return [
        RawWaveform(
            int(channel),
            int(nb),
            adcs[start:stop].copy(),
            str(compression),
        )
        for channel, nb, compression, start, stop in zip(
            channels, nb_samples, compressions, offsets[:-1], offsets[1:]
        )
    ]
