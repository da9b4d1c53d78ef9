import sys

from seat_usage.cli import main

sys.exit(main())
