"""Field types shared by the resource schemas."""

from typing import Annotated

from pydantic import Field

# MongoDB stores integers as at most 64-bit signed values
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]
