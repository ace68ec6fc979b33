"""Shared pydantic base for request bodies."""

from typing import Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

# Answers and answer keys are free text or numbers; booleans are rejected.
AnswerValue = Union[StrictInt, StrictFloat, StrictStr]
ScoreValue = Union[StrictInt, StrictFloat]


class CamelModel(BaseModel):
    """Request model read from camelCase JSON, also accepting field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Dump to the camelCase shape the services consume, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)
