"""
    Ensures DUNEsim runcard and input file utilities.
"""
from pathlib import Path
import numpy as np
import pytest
from dunesim.utils.utils import (
    check,
    check_in_folder,
    get_runcard_path,
    initialize_output_folder,
    load_charge_events,
    load_runcard,
    save_runcard,
)


def test_check():
    check("rle", ["none", "rle"])
    with pytest.raises(NotImplementedError):
        check("zip", ["none", "rle"])


def test_runcard_round_trip(tmp_path):
    setup = {
        "detector": {"name": "pdune", "nb_apas": 1},
        "detsim": {"seed": 3, "shape_time_const": [3000.0, 900.0]},
        "input": Path("/data/charges.npz"),
    }
    fname = tmp_path / "runcard.yaml"
    save_runcard(fname, setup)
    loaded = load_runcard(fname)
    assert loaded == setup
    assert isinstance(loaded["input"], Path)


def test_get_runcard_path(tmp_path, monkeypatch):
    folder = tmp_path / "cards"
    folder.mkdir()
    (folder / "mine.yaml").write_text("detsim: {}\n")
    monkeypatch.delenv("DUNESIM_PATH", raising=False)
    monkeypatch.setenv("DUNESIM_SEARCH_PATH", str(folder))
    assert get_runcard_path(Path("mine.yaml")) == folder / "mine.yaml"

    with pytest.raises(FileNotFoundError):
        get_runcard_path(Path("missing.yaml"))


def test_runcards_folder(tmp_path, monkeypatch):
    folder = tmp_path / "runcards"
    folder.mkdir()
    (folder / "default.yaml").write_text("detsim: {}\n")
    monkeypatch.delenv("DUNESIM_SEARCH_PATH", raising=False)
    monkeypatch.setenv("DUNESIM_PATH", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    assert get_runcard_path("default.yaml") == folder / "default.yaml"


def test_load_charge_events(tmp_path):
    rows = np.array(
        [
            [2, 5, 1.0, 0.0, 0.0],
            [0, 1, 0.0, 2.0, 0.0],
            [0, 1, 0.0, 1.0, 3.0],
            [0, 4, 4.0, 4.0, 4.0],
        ]
    )
    fname = tmp_path / "charges.npz"
    np.savez(fname, largeant=rows)

    events = load_charge_events(fname, "largeant")
    assert list(events) == [0, 2]
    assert sorted(events[0]) == [1, 4]
    # charges on the same channel are summed
    np.testing.assert_equal(events[0][1], [0.0, 3.0, 3.0])
    np.testing.assert_equal(events[2][5], [1.0, 0.0, 0.0])

    with pytest.raises(KeyError):
        load_charge_events(fname, "driftcharge")


def test_check_in_folder(tmp_path):
    folder = tmp_path / "out"
    initialize_output_folder(folder, False)
    assert (folder / "cards").is_dir()
    assert (folder / "rawdigits").is_dir()

    with pytest.raises(FileExistsError):
        check_in_folder(folder, False)

    check_in_folder(folder, True)
    assert folder.is_dir()
    assert not (folder / "cards").exists()
