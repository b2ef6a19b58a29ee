"""
    This module contains the real-to-complex transform engine.

    Forward transforms are unnormalized, inverse transforms divide by the
    transform size, so that ``inverse(forward(x)) == x``.
"""
import numpy as np
from .exceptions import ConfigurationError, PreconditionError
from .settings import is_power_of_two


class FFTEngine:
    """Fixed size real transform engine.

    The engine holds no mutable state, so one instance can be shared by
    concurrent workers.

    Example
    -------

    >>> import numpy as np
    >>> from dunesim.detsim.fft import FFTEngine
    >>> fft = FFTEngine(8)
    >>> kernel = fft.forward(np.eye(8)[0])
    >>> x = np.arange(8.0)
    >>> np.allclose(fft.convolute(x, kernel), x)
    True
    """

    def __init__(self, size: int):
        """
        Parameters
        ----------
        size: int
            Transform size, a power of two.

        Raises
        ------
        ConfigurationError
            If ``size`` is not a supported transform length.
        """
        if not is_power_of_two(size) or size < 2:
            raise ConfigurationError(
                f"Transform size must be a power of two greater than one, got {size}"
            )
        self.size = size
        self.freq_size = size // 2 + 1

    def _check_time(self, data: np.ndarray):
        if data.shape[-1] != self.size:
            raise PreconditionError(
                f"Expected {self.size} time samples, got {data.shape[-1]}"
            )

    def _check_freq(self, spectrum: np.ndarray):
        if spectrum.shape[-1] != self.freq_size:
            raise PreconditionError(
                f"Expected {self.freq_size} frequency bins, got {spectrum.shape[-1]}"
            )

    def forward(self, data: np.ndarray) -> np.ndarray:
        """Real to complex transform, of shape=(..., size // 2 + 1)."""
        data = np.asarray(data, dtype=float)
        self._check_time(data)
        return np.fft.rfft(data, n=self.size)

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        """Complex to real transform, of shape=(..., size)."""
        spectrum = np.asarray(spectrum, dtype=complex)
        self._check_freq(spectrum)
        return np.fft.irfft(spectrum, n=self.size)

    def convolute(self, data: np.ndarray, kernel: np.ndarray) -> np.ndarray:
        """Circular convolution of ``data`` with a kernel given in frequency space."""
        self._check_freq(kernel)
        return self.inverse(self.forward(data) * kernel)

    def correlation(self, shape1: np.ndarray, shape2: np.ndarray) -> np.ndarray:
        """Circular cross correlation, ``c[k] = sum_n shape1[n + k] * shape2[n]``."""
        return self.inverse(self.forward(shape1) * np.conj(self.forward(shape2)))

    def peak_correlation(self, shape1: np.ndarray, shape2: np.ndarray) -> float:
        """Lag of ``shape1`` with respect to ``shape2``.

        The correlation maximum is refined with a parabola through the peak
        bin and its two circular neighbours.

        Returns
        -------
        float
            The lag in ticks, in [0, size).
        """
        corr = self.correlation(shape1, shape2)
        peak = int(np.argmax(corr))
        left = corr[(peak - 1) % self.size]
        right = corr[(peak + 1) % self.size]
        denom = left - 2.0 * corr[peak] + right
        delta = 0.0 if denom == 0 else 0.5 * (left - right) / denom
        return (peak + delta) % self.size

    def shift_data(self, data: np.ndarray, shift: float) -> np.ndarray:
        """Delays ``data`` by ``shift`` ticks, through a phase rotation.

        Fractional shifts are allowed, the data is treated as periodic.
        """
        factor = -2.0 * np.pi * shift / self.size
        phases = np.exp(1j * factor * np.arange(self.freq_size))
        return self.inverse(self.forward(data) * phases)

    def aligned_sum(
        self, shape1: np.ndarray, shape2: np.ndarray, add: bool = False
    ) -> np.ndarray:
        """Shifts ``shape1`` so that it aligns with ``shape2``.

        Parameters
        ----------
        shape1: np.ndarray
            The shape to be aligned, of shape=(size,).
        shape2: np.ndarray
            The reference shape, of shape=(size,).
        add: bool
            Wether to sum ``shape2`` to the aligned shape.

        Returns
        -------
        np.ndarray
            The aligned shape, of shape=(size,).
        """
        shift = self.peak_correlation(shape1, shape2)
        aligned = self.shift_data(shape1, -shift)
        if add:
            aligned = aligned + np.asarray(shape2, dtype=float)
        return aligned
