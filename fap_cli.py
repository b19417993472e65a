#!/usr/bin/env python3
"""
Frequency Assignment Evaluation CLI.

Usage:
    python3 fap_cli.py run_config.yaml
    python3 fap_cli.py --config run_config.yaml
"""

import sys

from fap_ext.cli import main

if __name__ == '__main__':
    sys.exit(main())
