import sys

from raven_rag.cli import main

sys.exit(main())
