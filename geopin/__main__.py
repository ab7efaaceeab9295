import sys

from geopin.server import main

sys.exit(main())
