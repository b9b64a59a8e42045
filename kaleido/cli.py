#!/usr/bin/env python3
"""
Kaleido command line front end.

    kaleido                      # interactive, reads stdin
    kaleido program.kal          # run a file
    kaleido --backend interp --echo-ir < program.kal
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .backend import BACKENDS, create_backend
from .driver import Driver, DriverConfig


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kaleido",
        description="Compile and run Kaleido one top-level unit at a time.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="Source file to run (default: read standard input)",
    )
    parser.add_argument(
        "--backend",
        choices=sorted(BACKENDS),
        default="llvm",
        help="Code generation backend (default: llvm)",
    )
    parser.add_argument(
        "--echo-ir",
        action="store_true",
        help="Print the lowered form of every definition and extern",
    )
    parser.add_argument(
        "--dump-module",
        action="store_true",
        help="Print every registered function at end of input",
    )
    prompt = parser.add_mutually_exclusive_group()
    prompt.add_argument(
        "--prompt",
        default=None,
        help="Prompt written before each unit (default: 'ready> ' on a terminal)",
    )
    prompt.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never write a prompt",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    
    if args.no_prompt:
        prompt = None
    elif args.prompt is not None:
        prompt = args.prompt
    else:
        prompt = "ready> " if args.source is None and sys.stdin.isatty() else None
    
    config = DriverConfig(
        prompt=prompt,
        echo_ir=args.echo_ir,
        dump_module=args.dump_module,
    )
    backend = create_backend(args.backend)
    
    if args.source is None:
        Driver(backend, sys.stdin, config).run()
        return 0
    
    try:
        with open(args.source, "r", encoding="utf-8") as f:
            Driver(backend, f, config).run()
    except OSError as e:
        print(f"kaleido: cannot read {args.source}: {e.strerror}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
