"""Academic Records Engine.

Course enrollment eligibility, grade recording, GPA aggregation and batch
imports for an academic administration backend.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
