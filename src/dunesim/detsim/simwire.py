"""
    This module contains the SimWire class, simulating the raw signal on the
    TPC wires from the charge drifted onto each channel.
"""
import logging
from typing import List, Mapping, Optional
import numpy as np
from dunesim.configsim import PACKAGE
from dunesim.geometry.helpers import Geometry
from .convolution import ResponseConvolver
from .electronics_response import ElectronicsResponseModel
from .fft import FFTEngine
from .field_response import FieldResponseModel
from .noise import NoiseBank
from .rawdigit import RawWaveform
from .rng import RandomSource
from .settings import DetSimSettings
from .synthesis import SignalSynthesizer

logger = logging.getLogger(PACKAGE + ".detsim")


class SimWire:
    """Wire signal simulation.

    Construction builds the field and electronics responses, the transfer
    spectra and the noise bank, in this order. They are shared read-only by
    all the events processed afterwards.

    Example
    -------

    >>> import numpy as np
    >>> from dunesim.detsim.settings import DetSimSettings
    >>> from dunesim.detsim.simwire import SimWire
    >>> from dunesim.geometry.helpers import Geometry
    >>> planes = [{"signal_type": "induction", "nb_channels": 4},
    ...           {"signal_type": "collection", "nb_channels": 4}]
    >>> geometry = Geometry.from_planes(planes, plane_pitch=0.4763)
    >>> settings = DetSimSettings(nb_ticks=1024, nb_readout_samples=1000,
    ...                           nb_noise_channels=10, seed=3)
    >>> simwire = SimWire(settings, geometry)
    >>> digits = simwire.produce({5: np.ones(100)})
    >>> len(digits)
    8
    """

    def __init__(
        self,
        settings: DetSimSettings,
        geometry: Geometry,
        random_source: Optional[RandomSource] = None,
    ):
        """
        Parameters
        ----------
        settings: DetSimSettings
            The simulation settings.
        geometry: Geometry
            The detector channel map.
        random_source: RandomSource
            The uniform random source. If None, one is seeded from
            ``settings.seed``.
        """
        logger.warning(
            "SimWire implements a simple 1D response model, each detector "
            "should provide its own electronics response simulation"
        )
        self.settings = settings
        self.geometry = geometry
        self.random_source = random_source or RandomSource(settings.seed)
        self.fft = FFTEngine(settings.nb_ticks)

        self.noise_bank = NoiseBank.generate(settings, self.random_source, self.fft)

        self.field_responses = FieldResponseModel(
            settings, geometry.plane_pitch
        ).responses()
        self.electronics = ElectronicsResponseModel(settings).response()
        convolver = ResponseConvolver(self.fft, settings.field_bins)
        self.time_shapes = convolver.time_shapes(self.field_responses, self.electronics)
        self.transfer_spectra = convolver.transfer_spectra(
            self.field_responses, self.electronics
        )

        self.synthesizer = SignalSynthesizer(
            self.transfer_spectra,
            self.noise_bank,
            self.random_source,
            settings.nb_readout_samples,
            compression=settings.compression,
            fft=self.fft,
            nb_workers=settings.nb_workers,
        )

    def produce(self, charges: Mapping[int, np.ndarray]) -> List[RawWaveform]:
        """Simulates one event.

        Parameters
        ----------
        charges: Mapping[int, np.ndarray]
            Charge series keyed by channel number.

        Returns
        -------
        List[RawWaveform]
            One raw waveform per detector channel, in ascending channel order.
        """
        return self.synthesizer.process_event(charges, self.geometry)
