"""
    Ensures DUNEsim channel maps match the detector planes.
"""
import numpy as np
import pytest
from dunesim.geometry.helpers import Geometry, evt2planes
from dunesim.geometry.pdune import geometry as pdune


def test_pdune_geometry():
    geometry = Geometry.from_setup({"name": "pdune"})
    assert geometry.nb_channels == pdune["nb_event_channels"] == 15360
    assert geometry.plane_pitch == pdune["plane_pitch"]
    assert geometry.signal_type(0) == "induction"
    assert geometry.signal_type(1599) == "induction"
    assert geometry.signal_type(1600) == "collection"
    assert geometry.signal_type(2559) == "collection"
    assert geometry.signal_type(2560) == "induction"
    assert len(geometry.channels("collection")) == 6 * 960
    assert len(geometry.channels("induction")) == 6 * 1600

    single = Geometry.from_setup({"name": "pdune", "nb_apas": 1})
    assert single.nb_channels == pdune["nb_apa_channels"]


def test_custom_geometry():
    gsetup = {
        "name": "custom",
        "plane_pitch": 0.3,
        "planes": [
            {"signal_type": "collection", "nb_channels": 2},
            {"signal_type": "induction", "nb_channels": 1},
        ],
        "nb_apas": 2,
    }
    geometry = Geometry.from_setup(gsetup)
    assert geometry.signal_types == ["collection"] * 2 + ["induction"] + [
        "collection"
    ] * 2 + ["induction"]
    np.testing.assert_equal(geometry.channels("induction"), [2, 5])
    assert geometry.plane_pitch == 0.3


def test_invalid_geometry():
    with pytest.raises(ValueError):
        Geometry.from_setup({"name": "custom", "plane_pitch": 0.3})
    with pytest.raises(NotImplementedError):
        Geometry.from_setup({"name": "microboone"})
    with pytest.raises(NotImplementedError):
        Geometry(["induction", "shielding"], 0.5)
    with pytest.raises(IndexError):
        Geometry(["induction"], 0.5).signal_type(1)


def test_evt2planes():
    planes = [
        {"signal_type": "induction", "nb_channels": 2},
        {"signal_type": "collection", "nb_channels": 3},
    ]
    geometry = Geometry.from_planes(planes, nb_apas=2)
    event = np.arange(10 * 4).reshape(10, 4)
    inductions, collections = evt2planes(event, geometry)
    np.testing.assert_equal(inductions, event[[0, 1, 5, 6]])
    np.testing.assert_equal(collections, event[[2, 3, 4, 7, 8, 9]])

    with pytest.raises(ValueError):
        evt2planes(event[:9], geometry)
