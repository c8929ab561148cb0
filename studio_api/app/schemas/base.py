"""Shared model configuration."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model read and written with camelCase keys.

    Both the alias (``eventName``) and the field name (``event_name``)
    are accepted on input; output uses the alias.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """JSON-ready dict with camelCase keys, as stored in the collections."""
        return self.model_dump(mode="json", by_alias=True)
