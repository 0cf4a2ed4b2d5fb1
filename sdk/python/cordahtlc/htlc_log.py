# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

"""Append-only operation log for HTLC commands."""

import os
import sys
import time
from typing import Optional


def log(path: Optional[str], tag: str, message: str):
    """Append a timestamped entry to the operation log.

    A log that cannot be written is reported on stderr; the command's
    outcome is never affected.

    Args:
        path: Log file; None disables logging.
        tag: Short identifier, e.g. the command name.
        message: Action description.
    """
    if not path:
        return
    ts = time.strftime("%H:%M:%S")
    line = f"{ts} {tag}: {message}\n"
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a") as f:
            f.write(line)
    except OSError as e:
        print(f"Warning: could not write operation log {path}: {e}", file=sys.stderr)
