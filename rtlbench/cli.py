# SPDX-License-Identifier: BSD-2-Clause

import argparse
import inspect
import sys
import traceback
import logging

from pathlib import Path
from pprint import pformat

import dotenv

from .config import parse_config, find_root
from .errors import RtlBenchError, UnexpectedError
from .utils import get_cls_by_reference

log_level = logging.WARNING


DEFAULT_STEPS = {
    "build": "rtlbench.steps.build:BuildStep",
}


def _load_commands():
    root = find_root()
    # Toolchain executable overrides may live in the project's .env
    dotenv.load_dotenv(dotenv_path=root / ".env", override=False)
    config = parse_config(root)

    commands = {}

    if config.rtlbench.steps:
        steps = DEFAULT_STEPS | config.rtlbench.steps
    else:
        steps = DEFAULT_STEPS

    for step_name, step_reference in steps.items():
        step_cls = get_cls_by_reference(step_reference, context=f"step `{step_name}`")
        try:
            commands[step_name] = step_cls(config)
        except Exception as e:
            raise RtlBenchError(f"Encountered error while initializing step `{step_name}` "
                                f"using `{step_reference}`") from e
    return commands


def _build_parser(commands):
    parser = argparse.ArgumentParser(
        prog="rtlbench",
        description="Build simulator testbenches for RTL designs")

    parser.add_argument(
        "--verbose", "-v",
        dest="log_level",
        action="count",
        default=0,
        help="increase verbosity of messages; can be supplied multiple times to increase verbosity"
    )
    parser.add_argument(
        "--log-file", help=argparse.SUPPRESS,
        default=None, action="store"
    )

    command_argument = parser.add_subparsers(dest="command", required=True)
    for command_name, command in commands.items():
        command_subparser = command_argument.add_parser(command_name, help=inspect.getdoc(command))
        try:
            command.build_cli_parser(command_subparser)
        except Exception as e:
            raise RtlBenchError(f"Encountered error while building CLI argument parser for "
                                f"step `{command_name}`") from e
    return parser


def run(argv=sys.argv[1:]):
    try:
        commands = _load_commands()
        parser = _build_parser(commands)
    except RtlBenchError as e:
        print(f"Error while loading rtlbench configuration: {e}")
        sys.exit(1)

    args = parser.parse_args(argv)
    global log_level
    log_level = max(logging.WARNING - args.log_level * 10, 0)
    logging.getLogger().setLevel(logging.NOTSET)

    # Add stdout handler, with level as set
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)
    formatter = logging.Formatter('%(name)-13s: %(levelname)-8s %(message)s')
    console.setFormatter(formatter)
    logging.getLogger().addHandler(console)

    #Log to file with DEBUG level
    if args.log_file:
        filename = Path(args.log_file).absolute()
        print(f"> Logging to {str(filename)}")
        fh = logging.FileHandler(filename)
        fh.setLevel(logging.DEBUG)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        fh.setFormatter(formatter)
        logging.getLogger().addHandler(fh)

    try:
        try:
            commands[args.command].run_cli(args)
        except RtlBenchError:
            raise
        except Exception as e:
            # convert to RtlBenchError so all handling is same.
            raise UnexpectedError(
                f"Unexpected error, please report this:\n"
                f"args =\n{pformat(args)}\n"
                f"traceback =\n{''.join(traceback.format_exception(e))}"
            ) from e
    except RtlBenchError as e:
        print(f"Error while executing `{args.command}`: {e}")
        sys.exit(1)
    finally:
        logging.getLogger().removeHandler(console)
