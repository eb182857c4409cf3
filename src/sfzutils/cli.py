# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Command-line interface for sfzutils.

Provides subcommands:
- lex: print the token stream of an SFZ file
- compile: compile an SFZ file and print its regions and diagnostics
- play: query a compiled SFZ file with a pitch and velocity

The library itself never reads files; this module reads the SFZ file and
resolves #include names relative to it.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

from .instrument import CompiledInstrument, compile_regions
from .lexer import lex
from .playback import VoicePlayInfo, VoicePlayParameter
from .schema import SamplerErrorContext


def _build_root_parser():
    p = argparse.ArgumentParser(prog="sfzutils", description="sfzutils command-line tool")
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    c_lex = sub.add_parser("lex", help="Print the tokens of an SFZ file")
    c_lex.add_argument("input_file", help="Input SFZ file path")

    c_compile = sub.add_parser("compile", help="Compile an SFZ file and print its regions")
    c_compile.add_argument("input_file", help="Input SFZ file path")
    c_compile.add_argument("--json", action="store_true", help="Print regions as JSON")

    c_play = sub.add_parser("play", help="Ask a compiled SFZ file what to play for a note")
    c_play.add_argument("input_file", help="Input SFZ file path")
    c_play.add_argument("-p", "--pitch", type=int, required=True, help="MIDI pitch (0-127)")
    c_play.add_argument("-V", "--velocity", type=int, default=100, help="MIDI velocity (1-127, default: 100)")
    c_play.add_argument("-n", "--count", type=int, default=1, help="Number of note-ons to send (default: 1)")
    c_play.add_argument("-s", "--seed", type=int, help="Seed for random regions")

    return p


def make_include_handler(sfz_path: Path):
    """
    Returns an include handler that reads files relative to `sfz_path`.
    """
    base_dir = sfz_path.parent

    def handler(quoted_name: str) -> str:
        name = quoted_name.strip("\"")
        with open(base_dir / name, "r", encoding="utf-8") as f:
            return f.read()

    return handler


def _region_to_dict(region):
    data = dataclasses.asdict(region)
    for key in ("loop_mode", "trigger"):
        data[key] = data[key].name.lower()
    return data


def main(argv=None):
    """
    Generic entry point for `python -m sfzutils` or package-level CLI.

    Returns exit code (0 on success).
    """
    argv = list(argv) if argv is not None else None
    parser = _build_root_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        path = Path(args.input_file)
        if not path.exists():
            raise FileNotFoundError(f"SFZ file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        include_handler = make_include_handler(path)

        if args.command == "lex":
            tokens = lex(text, include_handler)
            for i, token in enumerate(tokens):
                print(f"tok[{i}] #{token.line} {token}")
            print(f"{len(tokens)} tokens")

        elif args.command == "compile":
            err = SamplerErrorContext()
            regions = compile_regions(text, err, include_handler)
            if args.json:
                print(json.dumps([_region_to_dict(r) for r in regions], indent=2))
            else:
                print(f"Compiled {len(regions)} regions from: {path}")
                for region in regions:
                    print(f"  line {region.line_number + 1}: {region.sample_file} "
                          f"key={region.lokey}..{region.hikey} only={region.onlykey} "
                          f"vel={region.lovel}..{region.hivel}")
            for message in err.messages():
                print(f"Warning: {message}", file=sys.stderr)

        elif args.command == "play":
            if args.count < 1:
                raise ValueError(f"Count must be at least 1, got {args.count}")
            err = SamplerErrorContext()
            instrument = CompiledInstrument.from_text(text, err, include_handler, seed=args.seed)
            params = VoicePlayParameter(args.pitch, args.velocity)
            info = VoicePlayInfo()
            for _ in range(args.count):
                instrument.play(info, params)
                if info.can_play():
                    print(f"{instrument.sample_file(info.sample_index)} "
                          f"transpose={info.transpose_amt:.4f} gain={info.gain:.4f} "
                          f"release={info.ampeg_release:g}")
                else:
                    print("no region")

        else:
            parser.print_help()
            return 2
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
