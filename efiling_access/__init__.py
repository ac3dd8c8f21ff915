# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
E-filing access core: recipient resolution and geography-scoped visibility
for daak distribution, meeting invitations and location-tagged listings.
"""

__version__ = "1.0.0"
