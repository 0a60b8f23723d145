import sys

from satnow.cli import main

sys.exit(main())
