"""
    This module contains the wrapper function for the ``dunesim responses``
    command, dumping the response functions and the noise distribution.

    Example
    -------

    Responses help output:

    .. code-block:: text

        $ dunesim responses --help
        usage: dunesim responses [-h] --output OUTPUT [--force] [--seed SEED] runcard

        Dump field, electronics and convolved responses and the noise distribution.

        positional arguments:
          runcard               yaml runcard path

        optional arguments:
          -h, --help            show this help message and exit
          --output OUTPUT, -o OUTPUT
                                the output folder
          --force               overwrite existing files if present
          --seed SEED           overrides the runcard random seed
"""
import logging
from pathlib import Path
import numpy as np
from dunesim.configsim import PACKAGE
from dunesim.detsim.settings import DetSimSettings
from dunesim.detsim.simwire import SimWire
from dunesim.geometry.helpers import COLLECTION, INDUCTION, Geometry
from dunesim.utils.utils import (
    check_in_folder,
    get_runcard_path,
    load_runcard,
    save_runcard,
)

logger = logging.getLogger(PACKAGE + ".diagnostics")

NOISE_BINS = 1000
NOISE_RANGE = (-10.0, 10.0)  # [ADC]


def add_arguments_responses(parser):
    """
    Adds responses subparser arguments.

    Parameters
    ----------
    parser: ArgumentParser
        Responses subparser object.
    """
    parser.add_argument("runcard", type=Path, help="yaml runcard path")
    parser.add_argument(
        "--output", "-o", type=Path, help="the output folder", required=True
    )
    parser.add_argument(
        "--force", action="store_true", help="overwrite existing files if present"
    )
    parser.add_argument(
        "--seed", type=int, help="overrides the runcard random seed", default=None
    )
    parser.set_defaults(func=responses)


def responses(args):
    """Wrapper responses function.

    Parameters
    ----------
    args: NameSpace
        Command line parsed arguments.

    Returns
    -------
    dict
        The computed histograms.
    """
    setup = load_runcard(get_runcard_path(args.runcard))
    if args.seed is not None:
        setup.setdefault("detsim", {})["seed"] = args.seed
    check_in_folder(args.output, args.force)
    save_runcard(args.output / "runcard.yaml", setup)
    return responses_main(setup, args.output)


def responses_main(setup: dict, output: Path) -> dict:
    """Responses main function.

    Builds the simulation from the runcard and saves its response functions
    to ``responses.npz`` and ``responses.png`` in the output folder.

    Parameters
    ----------
    setup: dict
        Settings dictionary, with ``detector`` and ``detsim`` sections.
    output: Path
        The output folder.

    Returns
    -------
    dict
        The computed histograms.
    """
    settings = DetSimSettings.from_setup(setup.get("detsim", {}))
    geometry = Geometry.from_setup(setup.get("detector", {}))
    simwire = SimWire(settings, geometry)

    histos = response_histograms(simwire)
    fname = output / "responses.npz"
    np.savez(fname, **histos)
    logger.info(f"Saved response functions at {fname}")

    fname = output / "responses.png"
    plot_responses(histos, fname)
    logger.info(f"Saved response plots at {fname}")
    return histos


def response_histograms(simwire: SimWire) -> dict:
    """Collects the response functions and the noise distribution.

    Parameters
    ----------
    simwire: SimWire
        The initialized simulation.

    Returns
    -------
    dict
        Arrays keyed by name: field responses, electronics response,
        convolved time shapes and the noise distribution counts and edges.
    """
    counts, edges = simwire.noise_bank.distribution(NOISE_BINS, NOISE_RANGE)
    return {
        "collection_field_response": simwire.field_responses[COLLECTION].response,
        "induction_field_response": simwire.field_responses[INDUCTION].response,
        "electronics_response": simwire.electronics.response,
        "collection_time_shape": simwire.time_shapes[COLLECTION],
        "induction_time_shape": simwire.time_shapes[INDUCTION],
        "noise_counts": counts,
        "noise_edges": edges,
    }


def plot_responses(histos: dict, fname: Path):
    """Plots the response functions and the noise distribution.

    Parameters
    ----------
    histos: dict
        The output of ``response_histograms``.
    fname: Path
        The output image file.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig = plt.figure(figsize=(12, 7))
    gs = fig.add_gridspec(nrows=2, ncols=3, hspace=0.35, wspace=0.3)

    panels = [
        ("collection_field_response", "Collection field response"),
        ("induction_field_response", "Induction field response"),
        ("electronics_response", "Electronics response"),
        ("collection_time_shape", "Electronics x collection"),
        ("induction_time_shape", "Electronics x induction"),
    ]
    for i, (key, title) in enumerate(panels):
        ax = fig.add_subplot(gs[i])
        ax.plot(histos[key], lw=0.8)
        ax.set_title(title)
        ax.set_xlabel("ticks")

    ax = fig.add_subplot(gs[5])
    edges = histos["noise_edges"]
    ax.stairs(histos["noise_counts"], edges)
    ax.set_title("Noise")
    ax.set_xlabel("Noise (ADC)")

    plt.savefig(fname, dpi=150, bbox_inches="tight")
    plt.close(fig)
