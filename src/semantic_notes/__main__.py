import sys

from semantic_notes.cli import main

sys.exit(main())
