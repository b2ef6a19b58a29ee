"""
    Ensures DUNEsim commands write raw digits and response diagnostics.
"""
import sys
import numpy as np
import pytest
from dunesim.detsim.rawdigit import load_raw_waveforms, waveforms2evt
from dunesim.detsim.simulate import simulate_main
from dunesim.diagnostics.responses import responses_main
from dunesim.scripts.dunesim import main
from dunesim.utils.utils import save_runcard

NB_TICKS = 1024


def build_setup(**detsim):
    options = {
        "nb_ticks": NB_TICKS,
        "nb_readout_samples": 1000,
        "nb_noise_channels": 5,
        "seed": 1,
    }
    options.update(detsim)
    return {
        "detector": {
            "name": "custom",
            "plane_pitch": 0.4763,
            "planes": [
                {"signal_type": "induction", "nb_channels": 3},
                {"signal_type": "collection", "nb_channels": 3},
            ],
        },
        "detsim": options,
    }


def add_info_columns(evt, event_id):
    """Prepends the event identifier and channel number columns."""
    nb_channels = len(evt)
    channels_col = np.arange(nb_channels).reshape([-1, 1])
    event_col = np.full_like(channels_col, event_id)
    return np.concatenate([event_col, channels_col, evt], axis=1)


def write_charges(fname, label="largeant"):
    # events 0 and 3, charge on channel 4 and on channels 1, 5
    evt0, evt3 = np.zeros((6, 400)), np.zeros((6, 400))
    evt0[4, 100:110] = 1000.0
    evt3[[1, 5], 100:110] = 1000.0
    rows = np.concatenate([add_info_columns(evt0, 0), add_info_columns(evt3, 3)])
    np.savez(fname, **{label: rows})
    return fname


def test_simulate_main(tmp_path):
    input_path = write_charges(tmp_path / "charges.npz")
    setup = build_setup(noise_fact=0.0, compression="rle")
    fnames = simulate_main(setup, input_path, tmp_path / "out")

    assert [f.name for f in fnames] == ["evt0_rawdigits.npz", "evt3_rawdigits.npz"]
    for fname in fnames:
        assert fname.parent == tmp_path / "out" / "rawdigits"

    waveforms = load_raw_waveforms(fnames[1])
    assert all(waveform.compression == "rle" for waveform in waveforms)
    event = waveforms2evt(waveforms)
    assert event.shape == (6, 1000)
    charged = np.flatnonzero(np.any(event != 0, axis=1))
    np.testing.assert_equal(charged, [1, 5])


def test_simulate_seed_override(tmp_path):
    input_path = write_charges(tmp_path / "charges.npz")
    setup = build_setup(noise_fact=1.0)
    first = simulate_main(setup, input_path, tmp_path / "a", seed=5)
    second = simulate_main(setup, input_path, tmp_path / "b", seed=5)
    for f1, f2 in zip(first, second):
        evt1 = waveforms2evt(load_raw_waveforms(f1))
        evt2 = waveforms2evt(load_raw_waveforms(f2))
        np.testing.assert_equal(evt1, evt2)


def test_simulate_label(tmp_path):
    input_path = write_charges(tmp_path / "charges.npz", label="driftcharge")
    with pytest.raises(KeyError):
        simulate_main(build_setup(), input_path, tmp_path / "out")
    fnames = simulate_main(
        build_setup(drift_charge_label="driftcharge"), input_path, tmp_path / "out"
    )
    assert len(fnames) == 2


def test_simulate_command(tmp_path, monkeypatch):
    input_path = write_charges(tmp_path / "charges.npz")
    runcard = tmp_path / "runcard.yaml"
    save_runcard(runcard, build_setup())
    output = tmp_path / "out"

    argv = ["dunesim", "simulate", str(runcard), "-i", str(input_path), "-o", str(output)]
    monkeypatch.setattr(sys, "argv", argv)
    main()
    assert (output / "cards" / "runcard.yaml").is_file()
    assert (output / "rawdigits" / "evt0_rawdigits.npz").is_file()

    # existing output folder needs --force
    with pytest.raises(FileExistsError):
        main()
    monkeypatch.setattr(sys, "argv", argv + ["--force", "--seed", "2"])
    main()
    assert (output / "rawdigits" / "evt3_rawdigits.npz").is_file()


def test_responses_main(tmp_path):
    histos = responses_main(build_setup(), tmp_path)
    assert (tmp_path / "responses.npz").is_file()
    assert (tmp_path / "responses.png").is_file()

    with np.load(tmp_path / "responses.npz") as archive:
        assert sorted(archive.files) == sorted(histos)
        assert archive["collection_field_response"].shape == (NB_TICKS,)
        assert archive["collection_time_shape"].shape == (NB_TICKS,)
        assert len(archive["noise_edges"]) == len(archive["noise_counts"]) + 1
    np.testing.assert_allclose(
        histos["collection_field_response"].sum(), 0.0354
    )
