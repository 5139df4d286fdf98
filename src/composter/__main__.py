from __future__ import annotations

import sys

from composter.main import main

sys.exit(main())
