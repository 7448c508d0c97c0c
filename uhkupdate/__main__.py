import sys

from uhkupdate.cli import main


sys.exit(main())
