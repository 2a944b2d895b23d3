#!/usr/bin/env python3
"""Deploy the Voote contract to the default network."""

import sys
from voote.cli import main

if __name__ == "__main__":
    sys.exit(main(["deploy", *sys.argv[1:]]))
