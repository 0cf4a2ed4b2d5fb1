# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

from .cli import main

raise SystemExit(main())
