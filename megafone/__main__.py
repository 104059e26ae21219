import sys

from megafone.cli import main

sys.exit(main())
