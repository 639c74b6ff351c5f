"""Run the HAC report command line."""
import sys

from .cli import main

sys.exit(main())
