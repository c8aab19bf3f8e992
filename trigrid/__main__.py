import sys
from trigrid.cli import main

sys.exit(main())
