import sys

from seam_shrink.cli import main

sys.exit(main())
