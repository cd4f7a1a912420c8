import sys

from skillcarver.main import main

sys.exit(main())
