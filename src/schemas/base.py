"""
Base schema for all API-facing models.

Provides the shared configuration that maps Python snake_case field names
onto the camelCase keys used by the detector contract and the HTTP API.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base class for models exchanged with the detector and API clients.

    Provides common functionality including:
    - camelCase aliases on input and output
    - Acceptance of snake_case names for Python callers
    - Rejection of NaN/Infinity in numeric fields
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        use_enum_values=False,  # Keep enums as enum instances
    )

    def to_dict(self) -> Dict[str, Any]:
        """
        Export to a JSON-compatible dictionary with camelCase keys.

        Returns:
            Dictionary with enum values converted to strings

        Example:
            >>> result.to_dict()
            >>> # Returns {"processedImageBase64": "...", "colorPalette": [...], ...}
        """
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
