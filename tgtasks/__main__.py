import sys

from tgtasks.server import main

sys.exit(main())
