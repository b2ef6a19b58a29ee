""" This module contains utility functions of general interest. """
from typing import Any, Dict
import multiprocessing
import shutil
from pathlib import Path, PosixPath
import logging
import yaml
import numpy as np
from dunesim.configsim import PACKAGE, get_dunesim_search_path

# instantiate logger
logger = logging.getLogger(PACKAGE + ".utils")


def check(check_instance: Any, check_list: list[Any]):
    """
    Checks that check_list contains check_instance object. If not, raises
    NotImplementedError.

    Parameters
    ----------
    check_instance: Any
        Object to check.
    check_list: list[Any]
        Available options.

    Raises
    ------
    NotImplementedError
        If ``check_instance`` is not in ``check_list``.
    """
    if not check_instance in check_list:
        raise NotImplementedError(
            f"Option not implemented, got {check_instance}, available: {check_list}"
        )


def load_charge_events(fname: Path, label: str) -> Dict[int, Dict[int, np.ndarray]]:
    """Loads the deposited charge of the drifted electrons from file.

    The ``.npz`` archive stores one array per producer, named after the
    producer label. Each row has the additional information columns followed
    by the charge collected in each tick: ``[event, channel, q_0, ..., q_n]``.

    Parameters
    ----------
    fname: Path
        The ``.npz`` archive path.
    label: str
        The drift charge producer label.

    Returns
    -------
    events: dict
        Maps each event identifier to a ``{channel: charge series}`` dict.

    Raises
    ------
    KeyError
        If the archive holds no array named ``label``.
    """
    with np.load(fname) as archive:
        if label not in archive.files:
            raise KeyError(
                f"No drift charge labelled '{label}' in {fname}, found: {archive.files}"
            )
        rows = archive[label]

    events = {}
    for row in rows:
        event_id, channel = int(row[0]), int(row[1])
        charges = events.setdefault(event_id, {})
        if channel in charges:
            charges[channel] = charges[channel] + row[2:]
        else:
            charges[channel] = np.array(row[2:], dtype=float)
    logger.debug(f"Loaded {len(events)} events from {fname}")
    return dict(sorted(events.items()))


def path_constructor(loader, node):
    """PyYaml utility function."""
    value = loader.construct_scalar(node)
    return Path(value)


def load_runcard(runcard_file: Path) -> dict:
    """Load runcard from yaml file.

    Parameters
    ----------
    runcard_file: Path
        The yaml to dump the dictionary.

    Returns
    -------
    runcard: dict
        The loaded settings dictionary.

    Note
    ----
    The pathlib.Path objects are automatically loaded if they are encoded
    with the following syntax:
    ```
    path: !Path 'path/to/file'
    ```
    """
    if not isinstance(runcard_file, Path):
        runcard_file = Path(runcard_file)

    yaml.add_constructor("!Path", path_constructor, Loader=yaml.FullLoader)
    with open(runcard_file, "r") as stream:
        runcard = yaml.load(stream, Loader=yaml.FullLoader)
    return runcard


def path_representer(dumper, data):
    """PyYaml utility function."""
    return dumper.represent_scalar("!Path", "%s" % data)


def save_runcard(fname: Path, setup: dict):
    """Save runcard to yaml file.

    Parameters
    ----------
    fname: Path
        The yaml output file.
    setup: Path
        The settings dictionary to be dumped.

    Note
    ----
    pathlib.PosixPath objects are automatically dumped.
    """
    yaml.add_representer(PosixPath, path_representer)
    with open(fname, "w") as f:
        yaml.dump(setup, f, indent=4)


def get_runcard_path(fname: Path) -> Path:
    """Retrieves the runcard path.

    If the supplied path is not a valid file, looks into directories from
    DUNESIM_SEARCH_PATH environment variable to find the first match.

    Parameters
    ----------
    fname: Path
        Path to runcard yaml file.

    Returns
    -------
    Path
        The retrieved runcard path.

    Raises
    ------
    FileNotFoundError
        If fname is not found.
    """
    fname = Path(fname)
    if fname.is_file():
        return fname

    for folder in get_dunesim_search_path():
        candidate = folder / fname
        if candidate.is_file():
            logger.debug(f"Found runcard at {candidate}")
            return candidate

    raise FileNotFoundError(f"Runcard {fname} not found in DUNESIM_SEARCH_PATH")


def check_in_folder(folder: Path, should_force: bool):
    """Creates the query folder.

    The ``should_force`` parameters controls the function behavior in case
    ``folder`` exists. If true, it overwrites the existent directory, otherwise
    exits.

    Parameters
    ----------
    folder: Path
        The directory to be checked.
    should_force: bool
        Wether to replace the already existing directory.

    Raises
    ------
    FileExistsError
        If output folder exists and ``should_force`` is False.
    """
    try:
        folder.mkdir(parents=True)
    except FileExistsError as error:
        if should_force:
            logger.warning(f"Overwriting output directory at {folder}")
            shutil.rmtree(folder)
            folder.mkdir()
        else:
            logger.error('Delete or run with "--force" to overwrite.')
            raise error
    else:
        logger.info(f"Creating output directory at {folder}")


def initialize_output_folder(output: Path, should_force: bool):
    """Creates the output directory structure.

    Parameters
    ----------
    output: Path
        The output directory.
    should_force: bool
        Wether to replace the already existing output directory.
    """
    check_in_folder(output, should_force)
    output.joinpath("cards").mkdir()
    output.joinpath("rawdigits").mkdir()


def get_nb_cpu_cores() -> int:
    """Returns the number of available cpus for the current process.

    Returns
    -------
    nb_cpus: int
        The number of available cpus for the current process.
    """
    return multiprocessing.cpu_count()
