#!/usr/bin/env python3
"""
Build a composite figure from a YAML description.

Usage:
    python scripts/build_figure.py figures/figure_1.yaml -o out/figure_1.pdf
"""
import sys

from pubfig.build import main

if __name__ == "__main__":
    sys.exit(main())
