"""PTB environment bootstrap.

Sets environment flags before python-telegram-bot is imported anywhere else.
Import this module first in the entrypoint.
"""

from __future__ import annotations

import os

# RetryAfter.retry_after as a timedelta, without the deprecation warning
os.environ.setdefault("PTB_TIMEDELTA", "1")
