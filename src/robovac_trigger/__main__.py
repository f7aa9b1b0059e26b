import sys

from robovac_trigger.cli import main

sys.exit(main())
