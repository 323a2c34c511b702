# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the academic records engine.

This package contains cross-cutting pieces shared by every domain:
- config: Application configuration and settings
- exceptions: The NotFound/Validation/Transaction error taxonomy
"""
