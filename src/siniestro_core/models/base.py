# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all claim value objects.

Every snapshot the engine receives or returns is immutable. Changes are
expressed by building a new instance through ``evolve``, which re-runs the
full validation chain so a derived snapshot can never be less valid than
the one it came from.
"""

from datetime import datetime
from typing import Annotated, Any

from beartype import beartype
from beartype.vale import Is
from pydantic import BaseModel, ConfigDict

# Timezone-aware instant for function signatures; pydantic fields use AwareDatetime.
AwareInstant = Annotated[
    datetime, Is[lambda value: value.utcoffset() is not None]
]


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict configuration for all value objects.

    Enforces:
    - Immutability (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Validation on assignment
    - Automatic whitespace stripping
    - Validated defaults
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    def evolve(self, **changes: Any) -> "BaseModelConfig":
        """Return a validated copy with ``changes`` applied.

        Unlike ``model_copy(update=...)`` this re-validates, so field
        constraints and model validators hold for the new snapshot.
        """
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self).model_validate(data)
