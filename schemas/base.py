"""
Base schema for operation parameters.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from core.utils.enum_converter import convert_enums_to_strings


class BaseOperationParams(BaseModel):
    """
    Common base for all operation parameter records.

    Subclasses declare a literal ``operation`` tag plus fields named exactly
    like the keyword arguments of the processing function they configure.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_dict(self) -> Dict[str, Any]:
        """Export keyword arguments for the processing function (tag excluded)."""
        data = self.model_dump(exclude={"operation"})
        return convert_enums_to_strings(data)
