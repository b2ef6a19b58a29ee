"""DUNEsim: wire readout signal synthesis for liquid argon TPCs."""
import logging
from dunesim.configsim import PACKAGE

__version__ = "0.1.0"

# package logger, children are named PACKAGE + ".<component>"
_logger = logging.getLogger(PACKAGE)
_logger.setLevel(logging.INFO)
if not _logger.handlers:
    _console = logging.StreamHandler()
    _console.setFormatter(logging.Formatter("[%(levelname)s] (%(name)s) %(message)s"))
    _logger.addHandler(_console)
