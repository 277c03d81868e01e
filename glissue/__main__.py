import sys

from glissue.main import main

sys.exit(main())
