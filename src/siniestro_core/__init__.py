# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Student-life death-claim lifecycle engine.

State machine, stage gates, regulatory deadlines, alerts and audit trail
for the claims ("siniestros") process, operating purely on value objects.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
