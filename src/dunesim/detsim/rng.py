"""
    This module contains the random source shared by the noise generation and
    the per channel noise selection.
"""
from typing import Optional, Tuple, Union
import numpy as np


class RandomSource:
    """Seeded source of uniform random numbers in [0, 1).

    Draws are consumed in call order, so a fixed seed and a fixed sequence of
    calls reproduce the same numbers.

    Example
    -------

    >>> from dunesim.detsim.rng import RandomSource
    >>> rng = RandomSource(seed=1)
    >>> r = rng.flat()
    >>> rnd = rng.flat_array((3, 2))
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Parameters
        ----------
        seed: int
            Generator seed. If None, fresh entropy is pulled from the OS.
        """
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def flat(self) -> float:
        """Draws one uniform value."""
        return float(self._generator.random())

    def flat_array(self, size: Union[int, Tuple[int, ...]]) -> np.ndarray:
        """Draws an array of uniform values, filled in C order."""
        return self._generator.random(size)
