"""
    This script is the DUNEsim package entry point. Parses the subcommands from
    command line and calls the appropriate function to run.

    Example
    -------

    Main help output:

    .. code-block:: text

        $ dunesim --help
        usage: dunesim [-h] {simulate,responses} ...

        dunesim

        positional arguments:
          {simulate,responses}
            simulate            simulate raw digits from the charge drifted onto the wires
            responses           dump field, electronics and convolved responses and the noise distribution

        optional arguments:
          -h, --help            show this help message and exit
"""
import argparse
from time import time as tm
from dunesim.detsim.simulate import add_arguments_simulate
from dunesim.diagnostics.responses import add_arguments_responses


def main():
    """Defines the DUNEsim main entry point."""
    parser = argparse.ArgumentParser(description="dunesim")

    subparsers = parser.add_subparsers()

    # simulate raw digits
    s_msg = "Simulate raw digits from the charge drifted onto the wires."
    s_subparser = subparsers.add_parser(
        "simulate", description=s_msg, help=s_msg.lower().strip(".")
    )
    add_arguments_simulate(s_subparser)

    # diagnostics
    r_msg = "Dump field, electronics and convolved responses and the noise distribution."
    r_subparser = subparsers.add_parser(
        "responses", description=r_msg, help=r_msg.lower().strip(".")
    )
    add_arguments_responses(r_subparser)

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        return

    start = tm()
    # execute parsed function
    args.func(args)
    print(f"Program done in {tm()-start} s")


if __name__ == "__main__":
    main()
