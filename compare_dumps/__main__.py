import sys

from compare_dumps.main import main

sys.exit(main())
