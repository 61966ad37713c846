from typing import Any, ClassVar, Dict, Optional, Set
from pydantic import BaseModel


class InputObject(BaseModel):
    """
    Request body model for the request pipeline.

    The caller allocates the instance and decoders fill it in place, so
    fields need defaults (or allocate with ``Model.model_construct()``).
    Subclasses override ``validate_input`` for checks that field types
    can't express and raise ``ValueError`` on bad input.
    """

    # JSON:API resource type; None means any type is accepted
    jsonapi_type: ClassVar[Optional[str]] = None

    def validate_input(self) -> None:
        return None

    @classmethod
    def known_keys(cls) -> Set[str]:
        keys = set()
        for name, field in cls.model_fields.items():
            keys.add(name)
            if field.alias:
                keys.add(field.alias)
            if isinstance(field.validation_alias, str):
                keys.add(field.validation_alias)
        return keys

    def populate(self, data: Dict[str, Any]) -> None:
        """Validate ``data`` against this model and copy the result onto ``self``."""
        parsed = type(self).model_validate(data)
        for name in type(self).model_fields:
            setattr(self, name, getattr(parsed, name))
