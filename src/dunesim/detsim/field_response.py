"""
    This module contains the response of the wires to the electric field.

    Collection wires see a linear ramp of induced current while electrons
    approach the wire. Induction wires see a bipolar square pulse of equal
    lobes, the electrons drifting towards and then away from the wire.
"""
from dataclasses import dataclass
import logging
import numpy as np
from dunesim.configsim import PACKAGE
from dunesim.geometry.helpers import COLLECTION, INDUCTION
from .exceptions import ConfigurationError
from .settings import DetSimSettings

logger = logging.getLogger(PACKAGE + ".detsim")


@dataclass(frozen=True, eq=False)
class FieldResponse:
    """Discretized field response of one plane type."""

    signal_type: str
    response: np.ndarray  # of shape=(nb ticks,)
    nb_bins: int  # ticks spent by electrons crossing the plane gap


def field_bin_count(
    correction: float, pitch: float, drift_velocity: float, sample_period: float
) -> int:
    """Number of ticks needed by drifting electrons to cross the plane gap.

    Parameters
    ----------
    correction: float
        Correction factor for the 3D path of electrons through the wires.
    pitch: float
        Distance between planes [cm].
    drift_velocity: float
        Electron drift velocity [cm/us].
    sample_period: float
        Digitization period [ns].

    Returns
    -------
    int
        The rounded number of bins.
    """
    velocity = drift_velocity * 1.0e-3  # cm/ns
    return int(np.rint(correction * abs(pitch) / (velocity * sample_period)))


def collection_response(nb_bins: int, amplitude: float, nb_ticks: int) -> np.ndarray:
    """Linear ramp of ``nb_bins`` ticks, starting from zero, whose sum is ``amplitude``.

    A ramp with less than two bins has no area and gives the zero waveform.
    """
    response = np.zeros(nb_ticks)
    ramp = np.arange(nb_bins, dtype=float)
    integral = ramp.sum()
    if integral > 0:
        response[:nb_bins] = ramp * amplitude / integral
    return response


def induction_response(nb_bins: int, amplitude: float, nb_ticks: int) -> np.ndarray:
    """Bipolar pulse, ``nb_bins`` ticks at ``+amplitude / nb_bins`` then ``nb_bins`` at minus that."""
    response = np.zeros(nb_ticks)
    if nb_bins > 0:
        response[:nb_bins] = amplitude / nb_bins
        response[nb_bins : 2 * nb_bins] = -amplitude / nb_bins
    return response


class FieldResponseModel:
    """Builds the collection and induction field responses.

    Example
    -------

    >>> from dunesim.detsim.settings import DetSimSettings
    >>> from dunesim.detsim.field_response import FieldResponseModel
    >>> model = FieldResponseModel(DetSimSettings(), plane_pitch=0.4763)
    >>> responses = model.responses()
    >>> sorted(responses)
    ['collection', 'induction']
    """

    def __init__(self, settings: DetSimSettings, plane_pitch: float):
        """
        Parameters
        ----------
        settings: DetSimSettings
            The simulation settings.
        plane_pitch: float
            Distance between consecutive wire planes [cm].
        """
        self.settings = settings
        self.plane_pitch = plane_pitch

    def _nb_bins(self, correction: float) -> int:
        return field_bin_count(
            correction,
            self.plane_pitch,
            self.settings.drift_velocity,
            self.settings.sample_period,
        )

    def collection(self) -> FieldResponse:
        """Collection plane response.

        Raises
        ------
        ConfigurationError
            If the ramp does not fit in the field bins.
        """
        nb_bins = self._nb_bins(self.settings.col_3d_correction)
        if nb_bins > self.settings.field_bins:
            raise ConfigurationError(
                f"Collection response spans {nb_bins} bins, "
                f"more than field_bins={self.settings.field_bins}"
            )
        response = collection_response(
            nb_bins, self.settings.col_field_resp_amp, self.settings.nb_ticks
        )
        return FieldResponse(COLLECTION, response, nb_bins)

    def induction(self) -> FieldResponse:
        """Induction plane response.

        Raises
        ------
        ConfigurationError
            If the two lobes do not fit in the field bins.
        """
        nb_bins = self._nb_bins(self.settings.ind_3d_correction)
        if 2 * nb_bins > self.settings.field_bins:
            raise ConfigurationError(
                f"Induction response spans {2 * nb_bins} bins, "
                f"more than field_bins={self.settings.field_bins}"
            )
        response = induction_response(
            nb_bins, self.settings.ind_field_resp_amp, self.settings.nb_ticks
        )
        return FieldResponse(INDUCTION, response, nb_bins)

    def responses(self) -> dict:
        """Returns both field responses, keyed by signal type."""
        col = self.collection()
        ind = self.induction()
        logger.info(
            f"Field response bins: collection {col.nb_bins}, induction {ind.nb_bins}"
        )
        if col.nb_bins == 0 or ind.nb_bins == 0:
            logger.warning("Zero field response bins, the plane will see no signal")
        return {COLLECTION: col, INDUCTION: ind}
