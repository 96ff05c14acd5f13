"""
Shared field types for request schemas.
"""
from typing import Annotated
from decimal import Decimal
from pydantic import Field, StringConstraints

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PositiveAmount = Annotated[Decimal, Field(gt=0)]
