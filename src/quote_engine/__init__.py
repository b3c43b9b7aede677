# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Commercial Quote Engine.

Rates, assesses and quotes commercial insurance products: rate resolution
with fallback, weighted risk scoring, premium calculation and eligibility.
"""

__version__ = "1.0.0"
