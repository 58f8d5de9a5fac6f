import sys

from .generate_docset import main

sys.exit(main())
