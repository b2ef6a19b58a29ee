"""
    This module contains the detector geometry description consumed by the
    simulation and the helper functions that split events into planes.
"""
from typing import List, Sequence, Tuple
import numpy as np
from dunesim.utils.utils import check
from .pdune import geometry as pdune_geometry

INDUCTION = "induction"
COLLECTION = "collection"
SIGNAL_TYPES = [INDUCTION, COLLECTION]


class Geometry:
    """Channel map of the readout.

    Holds the number of channels, the signal type of each channel and the
    distance between consecutive wire planes. Channels are numbered from 0 in
    the order the planes are listed, APA after APA.

    Example
    -------

    >>> from dunesim.geometry.helpers import Geometry
    >>> planes = [{"signal_type": "induction", "nb_channels": 2},
    ...           {"signal_type": "collection", "nb_channels": 3}]
    >>> geo = Geometry.from_planes(planes, nb_apas=2, plane_pitch=0.5)
    >>> geo.nb_channels
    10
    >>> geo.signal_type(2)
    'collection'
    """

    def __init__(self, signal_types: Sequence[str], plane_pitch: float):
        """
        Parameters
        ----------
        signal_types: Sequence[str]
            The signal type of each channel, ordered by channel number.
            Available options: induction | collection.
        plane_pitch: float
            Distance between consecutive wire planes [cm].
        """
        for signal_type in set(signal_types):
            check(signal_type, SIGNAL_TYPES)
        self.signal_types = list(signal_types)
        self.plane_pitch = plane_pitch
        self._is_collection = np.array(
            [s == COLLECTION for s in self.signal_types], dtype=bool
        )

    @property
    def nb_channels(self) -> int:
        return len(self.signal_types)

    def signal_type(self, channel: int) -> str:
        """Returns the signal type of ``channel``.

        Raises
        ------
        IndexError
            If ``channel`` is not a valid channel number.
        """
        if not 0 <= channel < self.nb_channels:
            raise IndexError(
                f"Channel {channel} out of range, detector has {self.nb_channels} channels"
            )
        return self.signal_types[channel]

    def channels(self, signal_type: str) -> np.ndarray:
        """Returns the channel numbers of a given signal type, in ascending order."""
        check(signal_type, SIGNAL_TYPES)
        mask = self._is_collection if signal_type == COLLECTION else ~self._is_collection
        return np.flatnonzero(mask)

    @classmethod
    def from_planes(
        cls, planes: List[dict], nb_apas: int = 1, plane_pitch: float = 0.5
    ) -> "Geometry":
        """Builds the channel map repeating the ``planes`` list for each APA.

        Parameters
        ----------
        planes: List[dict]
            Each item has the ``signal_type`` and ``nb_channels`` keys.
        nb_apas: int
            Number of APAs.
        plane_pitch: float
            Distance between consecutive wire planes [cm].

        Returns
        -------
        Geometry
            The detector channel map.
        """
        apa = []
        for plane in planes:
            apa.extend([plane["signal_type"]] * int(plane["nb_channels"]))
        return cls(apa * nb_apas, plane_pitch)

    @classmethod
    def from_setup(cls, gsetup: dict) -> "Geometry":
        """Builds the channel map from the runcard ``detector`` section.

        Parameters
        ----------
        gsetup: dict
            The detector settings. ``name`` selects ``pdune`` or ``custom``.
            Custom detectors must provide the ``planes`` list and
            ``plane_pitch``. ``nb_apas`` overrides the preset value.

        Returns
        -------
        Geometry
            The detector channel map.
        """
        name = gsetup.get("name", "pdune")
        check(name, ["pdune", "custom"])
        if name == "pdune":
            base = pdune_geometry
        else:
            base = {}
        planes = gsetup.get("planes", base.get("planes"))
        nb_apas = gsetup.get("nb_apas", base.get("nb_apas", 1))
        plane_pitch = gsetup.get("plane_pitch", base.get("plane_pitch"))
        if planes is None or plane_pitch is None:
            raise ValueError(
                "Custom detector needs both 'planes' and 'plane_pitch' settings"
            )
        return cls.from_planes(planes, nb_apas, plane_pitch)


def evt2planes(event: np.ndarray, geometry: Geometry) -> Tuple[np.ndarray, np.ndarray]:
    """
    Splits event array into induction and collection channels.

    Parameters
    ----------
    event: np.array
        Raw digits array, of shape=(nb channels, nb samples).
    geometry: Geometry
        The detector channel map.

    Returns
    -------
    inductions: np.array
        Induction channels array, of shape=(nb induction channels, nb samples).
    collections: np.array
        Collection channels array, of shape=(nb collection channels, nb samples).
    """
    if len(event) != geometry.nb_channels:
        raise ValueError(
            f"Event has {len(event)} channels, geometry has {geometry.nb_channels}"
        )
    inductions = event[geometry.channels(INDUCTION)]
    collections = event[geometry.channels(COLLECTION)]
    return inductions, collections
