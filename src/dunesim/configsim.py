# This file is part of DUNEsim
import os
from pathlib import Path

PACKAGE = "dunesim"


def get_dunesim_path():
    """
    Loads DUNEsim repository root directory path from environment variable.

    Returns
    -------
        - Path, the path to DUNEsim repository root directory

    Raises
    ------
        - RuntimeError, if DUNESIM_PATH is not set
    """
    root = os.environ.get("DUNESIM_PATH")
    if root is not None:
        return Path(root)
    error_msg = f"""
Please, make the environment variable DUNESIM_PATH point to the DUNEsim repository root directory"""
    raise RuntimeError(error_msg)


def get_dunesim_search_path():
    """
    Retrieves the list of directories to look for the runcard.
    Loads DUNESIM_SEARCH_PATH from environment variable (a colon separated
    list of folders).
    The first item is automatically set to the current directory.
    The last item is the runcards folder in the DUNEsim repository, if
    DUNESIM_PATH is set.

    Set this variable with:
        `export DUNESIM_SEARCH_PATH=<new path>:$DUNESIM_SEARCH_PATH`

    Returns
    -------
        - list, of Path objects from DUNESIM_SEARCH_PATH
    """
    # get directories from colon separated list
    env_var = os.environ.get("DUNESIM_SEARCH_PATH")
    search_path = [] if env_var is None else env_var.split(":")

    # prepend current directory
    search_path.insert(0, ".")

    # append the runcards directory
    if os.environ.get("DUNESIM_PATH") is not None:
        search_path.append(get_dunesim_path() / "runcards")

    # remove duplicates
    search_path = list(dict.fromkeys(map(str, search_path)))

    # turn elements into Path objects
    return list(map(Path, search_path))
