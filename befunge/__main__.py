import sys

from befunge.cli import main

sys.exit(main())
