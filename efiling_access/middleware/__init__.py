# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for the optional HTTP embedding.

Error handling that renders scoping exceptions as problem documents.
"""
