"""
    This module contains the DetSimSettings class, that keeps track of the
    wire simulation settings read from the runcard ``detsim`` section.
"""
from dataclasses import dataclass, fields
from typing import Optional, Tuple
import math
from dunesim.geometry import pdune
from dunesim.utils.utils import check
from .exceptions import ConfigurationError

COMPRESSIONS = ["none", "rle"]


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@dataclass(frozen=True)
class DetSimSettings:
    """Wire simulation settings.

    Times are in ns, frequencies in kHz, lengths in cm and velocities in
    cm/us. Clock and readout defaults are the protoDUNE ones.
    """

    drift_charge_label: str = "largeant"  # drift charge producer label
    compression: str = "none"  # none | rle
    noise_fact: float = 0.0132  # noise scale factor
    noise_width: float = 62.4  # exponential noise width [kHz]
    low_cutoff: float = 7.5  # low frequency filter cutoff [kHz]
    field_bins: int = 75  # number of bins for field response
    col_3d_correction: float = 2.5  # 3D path correction at collection plane
    ind_3d_correction: float = 1.5  # 3D path correction at induction plane
    col_field_resp_amp: float = 0.0354  # collection field response amplitude
    ind_field_resp_amp: float = 0.018  # induction field response amplitude
    shape_time_const: Tuple[float, float] = (3000.0, 900.0)  # (fast, slow) [ns]
    nb_noise_channels: int = 100  # noise bank size
    lofilter_steepness: float = 0.5  # low frequency filter sigmoid width [bins]
    noise_jitter: float = 0.1  # relative spectral amplitude randomization
    seed: Optional[int] = None
    nb_workers: int = 1  # -1 uses all cpu cores
    sample_period: float = pdune.sample_period  # [ns]
    nb_ticks: int = pdune.nb_fft_ticks  # transform size
    nb_readout_samples: int = pdune.nb_tdc_ticks
    drift_velocity: float = pdune.drift_velocity  # [cm/us]

    def __post_init__(self):
        # yaml gives lists, keep the dataclass hashable
        object.__setattr__(self, "shape_time_const", tuple(self.shape_time_const))
        self.validate()

    def validate(self):
        """Checks settings consistency.

        Raises
        ------
        ConfigurationError
            If any setting is out of its domain.
        NotImplementedError
            If the compression scheme is not available.
        """
        check(self.compression, COMPRESSIONS)
        if not is_power_of_two(self.nb_ticks):
            raise ConfigurationError(
                f"nb_ticks must be a power of two transform size, got {self.nb_ticks}"
            )
        if self.nb_readout_samples <= 0:
            raise ConfigurationError(
                f"nb_readout_samples must be positive, got {self.nb_readout_samples}"
            )
        if not 0 < self.field_bins <= self.nb_ticks:
            raise ConfigurationError(
                f"field_bins must be in (0, {self.nb_ticks}], got {self.field_bins}"
            )
        if self.nb_noise_channels < 0:
            raise ConfigurationError(
                f"nb_noise_channels must not be negative, got {self.nb_noise_channels}"
            )
        for name in ["sample_period", "drift_velocity", "noise_width", "lofilter_steepness"]:
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive, got {getattr(self, name)}"
                )
        if not 0 <= self.noise_jitter <= 1:
            raise ConfigurationError(
                f"noise_jitter must be in [0, 1], got {self.noise_jitter}"
            )
        if len(self.shape_time_const) != 2:
            raise ConfigurationError(
                f"shape_time_const needs (fast, slow) constants, got {self.shape_time_const}"
            )
        if any(not math.isfinite(t) or t <= 0 for t in self.shape_time_const):
            raise ConfigurationError(
                f"Shaping time constants must be positive, got {self.shape_time_const}"
            )
        if self.nb_workers == 0 or self.nb_workers < -1:
            raise ConfigurationError(
                f"nb_workers must be positive or -1, got {self.nb_workers}"
            )

    @classmethod
    def from_setup(cls, setup: dict) -> "DetSimSettings":
        """Builds settings from the runcard dictionary.

        Parameters
        ----------
        setup: dict
            The full runcard or its ``detsim`` section.

        Returns
        -------
        DetSimSettings
            The validated settings.

        Raises
        ------
        ConfigurationError
            If unknown keys are given or settings are invalid.
        """
        dsetup = setup.get("detsim", setup)
        known = {f.name for f in fields(cls)}
        unknown = set(dsetup) - known
        if unknown:
            raise ConfigurationError(f"Unknown detsim settings: {sorted(unknown)}")
        return cls(**dsetup)
