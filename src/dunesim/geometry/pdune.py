"""
    This module contains the pDUNE geometry and detector properties parameters.
"""


nb_tdc_ticks = 6000  # detector readout samples number
nb_fft_ticks = 8192  # transform size, smallest power of two above nb_tdc_ticks
nb_ichannels = 800  # channel number in induction plane
nb_cchannels = 960  # channel number in collection plane
nb_apas = 6  # APAs number
nb_apa_channels = 2 * nb_ichannels + nb_cchannels  # number of channels per apa
nb_event_channels = nb_apas * nb_apa_channels  # total channel number

plane_pitch = 0.4763  # distance between consecutive wire planes [cm]
sample_period = 500.0  # digitization period [ns]
drift_velocity = 0.1565  # electron drift velocity at 500 V/cm [cm/us]

# channels are ordered as U (induction), V (induction), X (collection) per apa
planes = [
    {"signal_type": "induction", "nb_channels": nb_ichannels},
    {"signal_type": "induction", "nb_channels": nb_ichannels},
    {"signal_type": "collection", "nb_channels": nb_cchannels},
]

geometry = {
    "nb_tdc_ticks": nb_tdc_ticks,
    "nb_fft_ticks": nb_fft_ticks,
    "nb_ichannels": nb_ichannels,
    "nb_cchannels": nb_cchannels,
    "nb_apas": nb_apas,
    "nb_apa_channels": nb_apa_channels,
    "nb_event_channels": nb_event_channels,
    "plane_pitch": plane_pitch,
    "sample_period": sample_period,
    "drift_velocity": drift_velocity,
    "planes": planes,
}
