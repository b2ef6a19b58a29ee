"""
    This module contains the wrapper function for the ``dunesim simulate``
    command.

    Example
    -------

    Simulate help output:

    .. code-block:: text

        $ dunesim simulate --help
        usage: dunesim simulate [-h] -i INPUT --output OUTPUT [--force] [--seed SEED] runcard

        Simulate raw digits from the charge drifted onto the wires.

        positional arguments:
          runcard               yaml runcard path

        optional arguments:
          -h, --help            show this help message and exit
          -i INPUT              path to the drifted charge .npz archive
          --output OUTPUT, -o OUTPUT
                                the output folder
          --force               overwrite existing files if present
          --seed SEED           overrides the runcard random seed
"""
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional
import numpy as np
from tqdm.auto import tqdm
from dunesim.configsim import PACKAGE
from dunesim.geometry.helpers import Geometry, evt2planes
from dunesim.utils.utils import (
    get_runcard_path,
    initialize_output_folder,
    load_charge_events,
    load_runcard,
    save_runcard,
)
from .rawdigit import save_raw_waveforms, waveforms2evt
from .settings import DetSimSettings
from .simwire import SimWire

logger = logging.getLogger(PACKAGE + ".simulate")


def add_arguments_simulate(parser):
    """
    Adds simulate subparser arguments.

    Parameters
    ----------
    parser: ArgumentParser
        Simulate subparser object.
    """
    parser.add_argument("runcard", type=Path, help="yaml runcard path")
    parser.add_argument(
        "-i",
        type=Path,
        help="path to the drifted charge .npz archive",
        metavar="INPUT",
        dest="input_path",
        required=True,
    )
    parser.add_argument(
        "--output", "-o", type=Path, help="the output folder", required=True
    )
    parser.add_argument(
        "--force", action="store_true", help="overwrite existing files if present"
    )
    parser.add_argument(
        "--seed", type=int, help="overrides the runcard random seed", default=None
    )
    parser.set_defaults(func=simulate)


def simulate(args):
    """Wrapper simulate function.

    Parameters
    ----------
    args: NameSpace
        Command line parsed arguments. It should contain runcard file name,
        input archive path, output folder, force and seed options.

    Returns
    -------
    list
        The saved raw digits file paths.
    """
    setup = load_runcard(get_runcard_path(args.runcard))
    if args.seed is not None:
        setup.setdefault("detsim", {})["seed"] = args.seed
    initialize_output_folder(args.output, args.force)
    save_runcard(args.output / "cards/runcard.yaml", setup)

    return simulate_main(setup, args.input_path, args.output)


def simulate_main(
    setup: dict, input_path: Path, output: Path, seed: Optional[int] = None
) -> list:
    """Simulate main function.

    Loads the drifted charge events, simulates the raw digits of every
    channel and saves one archive per event.

    Parameters
    ----------
    setup: dict
        Settings dictionary, with ``detector`` and ``detsim`` sections.
    input_path: Path
        Path to the drifted charge ``.npz`` archive.
    output: Path
        The output folder, raw digits go to its ``rawdigits`` subfolder.
    seed: int
        Overrides the runcard random seed.

    Returns
    -------
    list
        The saved raw digits file paths.
    """
    settings = DetSimSettings.from_setup(setup.get("detsim", {}))
    if seed is not None:
        settings = replace(settings, seed=seed)
    geometry = Geometry.from_setup(setup.get("detector", {}))
    simwire = SimWire(settings, geometry)

    events = load_charge_events(input_path, settings.drift_charge_label)
    logger.info(f"Simulating {len(events)} events from {input_path}")

    folder = output / "rawdigits"
    folder.mkdir(parents=True, exist_ok=True)
    fnames = []
    for event_id, charges in tqdm(events.items(), desc="detsim.simulate"):
        digits = simwire.produce(charges)
        fname = folder / f"evt{event_id}_rawdigits.npz"
        save_raw_waveforms(fname, digits)
        fnames.append(fname)
        log_plane_rms(waveforms2evt(digits), geometry, event_id)

    logger.info(f"Saved raw digits at {folder}")
    return fnames


def log_plane_rms(event: np.ndarray, geometry: Geometry, event_id: int):
    """Logs the mean adc RMS of induction and collection channels."""
    inductions, collections = evt2planes(event, geometry)
    for name, plane in [("induction", inductions), ("collection", collections)]:
        if len(plane):
            rms = np.sqrt(np.mean(plane.astype(float) ** 2, axis=1)).mean()
            logger.info(f"Event {event_id}: {name} mean adc RMS {rms:.3f}")
