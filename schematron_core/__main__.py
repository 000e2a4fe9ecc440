import sys

from schematron_core.cli import main

sys.exit(main())
