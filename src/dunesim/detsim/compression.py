"""
    This module contains the lossless compression schemes for raw digits.

    Available schemes:

    - ``none``: the adc sequence is stored as is
    - ``rle``: run-length encoding, the sequence is stored as flattened
      ``(value, run length)`` pairs, run lengths fit a signed 16 bit integer
"""
import numpy as np
from dunesim.utils.utils import check

ADC_DTYPE = np.int16
MAX_RUN = np.iinfo(ADC_DTYPE).max


def compress(adcs: np.ndarray, scheme: str) -> np.ndarray:
    """Compresses an adc sequence.

    Parameters
    ----------
    adcs: np.ndarray
        The adc counts, of shape=(nb samples,).
    scheme: str
        Available options: none | rle.

    Returns
    -------
    np.ndarray
        The encoded sequence, of int16 type.
    """
    check(scheme, ["none", "rle"])
    adcs = np.asarray(adcs, dtype=ADC_DTYPE)
    if scheme == "none":
        return adcs.copy()

    if adcs.size == 0:
        return np.zeros(0, dtype=ADC_DTYPE)
    starts = np.flatnonzero(np.diff(adcs)) + 1
    starts = np.concatenate([[0], starts])
    lengths = np.diff(np.concatenate([starts, [adcs.size]]))

    values, runs = [], []
    for value, length in zip(adcs[starts], lengths):
        nb_full, rest = divmod(int(length), MAX_RUN)
        values.extend([value] * nb_full)
        runs.extend([MAX_RUN] * nb_full)
        if rest:
            values.append(value)
            runs.append(rest)
    pairs = np.stack([values, runs], axis=1).astype(ADC_DTYPE)
    return pairs.flatten()


def uncompress(data: np.ndarray, scheme: str) -> np.ndarray:
    """Restores the adc sequence encoded by ``compress``.

    Parameters
    ----------
    data: np.ndarray
        The encoded sequence.
    scheme: str
        Available options: none | rle.

    Returns
    -------
    np.ndarray
        The adc counts, of int16 type.

    Raises
    ------
    ValueError
        If the run-length stream is malformed.
    """
    check(scheme, ["none", "rle"])
    data = np.asarray(data, dtype=ADC_DTYPE)
    if scheme == "none":
        return data.copy()

    if data.size % 2:
        raise ValueError("Run-length stream must hold (value, length) pairs")
    pairs = data.reshape(-1, 2)
    if np.any(pairs[:, 1] <= 0):
        raise ValueError("Run-length stream holds non positive run lengths")
    return np.repeat(pairs[:, 0], pairs[:, 1].astype(np.int64))
