# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- Signed, time-limited session tokens (itsdangerous)
- Cookie transport for the user and admin sessions
- Resolvers that turn a cookie back into a Principal
"""
