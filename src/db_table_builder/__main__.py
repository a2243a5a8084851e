"""Allow ``python -m db_table_builder``."""

import sys

from db_table_builder.cli import main

sys.exit(main())
