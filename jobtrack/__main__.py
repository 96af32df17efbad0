import sys

from jobtrack.cli import main

sys.exit(main())
