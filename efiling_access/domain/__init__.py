# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the e-filing access core.

This package contains pure functions with no side effects: target validation,
global-role checks and visibility predicate construction. Nothing here talks
to the entity directory.
"""
