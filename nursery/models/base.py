"""Shared pydantic base for documents stored under camelCase keys."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StoreModel(BaseModel):
    """Python attributes are snake_case; the database keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self) -> dict:
        """Payload for the database: aliased keys, no `id` (it is the node key)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
