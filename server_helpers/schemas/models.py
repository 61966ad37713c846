from typing import ClassVar, List
from pydantic import BaseModel, Field

from server_helpers.db.fields import check_strings_for_injection
from server_helpers.schemas.base import InputObject

TAG_DELIMITER = "::"


class ModelRequest(InputObject):
    jsonapi_type: ClassVar[str] = "models"

    id: str = ""
    name: str = ""
    tags: str = ""  # "red::green::blue"

    def validate_input(self):
        if not self.name:
            raise ValueError("name is required")
        check_strings_for_injection(self.id, self.name, self.tags)


class ModelResponse(BaseModel):
    jsonapi_type: ClassVar[str] = "models"

    id: str
    name: str
    tags: List[str] = Field(default_factory=list)
    owner_id: str = ""
