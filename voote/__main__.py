import sys

from voote.cli import main

sys.exit(main())
