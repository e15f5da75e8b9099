#!/usr/bin/env python3
"""
TerraMap - Generate a procedural island map from a source checkout.

Usage:
    python3 main.py                                   # Default map to output/map.png
    python3 main.py archipelago                       # Use a preset
    python3 main.py archipelago --elevation-seed hi   # Preset with generate options
    python3 main.py list-presets                      # Any terramap command
    python3 main.py --help                            # Show help

A leading preset name expands to ``generate output/map.png --preset <name>``;
everything else is passed to the terramap CLI unchanged.
"""

import sys
from pathlib import Path

# Add src to path so we can import without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))

DEFAULT_OUTPUT = "output/map.png"


def expand_args(argv, presets):
    """Rewrite the preset shorthand into a CLI ``generate`` invocation."""
    args = list(argv)
    if not args:
        return ["generate", DEFAULT_OUTPUT]
    if args[0] in presets:
        return ["generate", DEFAULT_OUTPUT, "--preset", args[0]] + args[1:]
    return args


def main():
    from terramap.cli import app
    from terramap.config import list_presets

    app(args=expand_args(sys.argv[1:], list_presets()), prog_name="terramap")


if __name__ == "__main__":
    main()
