"""
JSON:API document codec for InputObject models.

Only primary data is handled: a single resource object or a list of them,
each with ``type``, ``id`` and ``attributes``. Relationships, links and
included resources are not read or written.

A model maps onto a resource by its ``jsonapi_type`` class attribute; the
``id`` field (when the model has one) is the resource id and every other
field is an attribute.
"""
import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from server_helpers.schemas.base import InputObject
from server_helpers.server.errors import RequestDecodeError, ResponseEncodeError

MEDIA_TYPE = "application/vnd.api+json"


class ResourceObject(BaseModel):
    type: str
    id: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class Document(BaseModel):
    data: ResourceObject


def unmarshal_payload(body: bytes, target: InputObject):
    try:
        doc = Document.model_validate_json(body)
    except ValidationError as e:
        raise RequestDecodeError(f"invalid jsonapi document: {e}") from e

    resource = doc.data
    expected = type(target).jsonapi_type
    if expected is not None and resource.type != expected:
        raise RequestDecodeError(f"jsonapi: resource type '{resource.type}' does not match '{expected}'")

    data = dict(resource.attributes)
    if resource.id is not None and "id" in type(target).model_fields:
        data["id"] = resource.id

    try:
        target.populate(data)
    except ValidationError as e:
        raise RequestDecodeError(f"invalid jsonapi attributes: {e}") from e


def _resource(model: Any) -> Dict[str, Any]:
    resource_type = getattr(type(model), "jsonapi_type", None)
    if not isinstance(model, BaseModel) or not resource_type:
        raise ResponseEncodeError(f"jsonapi: {type(model).__name__} is not a resource model")

    # NaN and Infinity have no JSON form; refuse them instead of writing null
    try:
        json.dumps(model.model_dump(), allow_nan=False, default=str)
        attributes = model.model_dump(mode="json")
    except ValueError as e:
        raise ResponseEncodeError(f"jsonapi: could not encode {type(model).__name__}: {e}") from e

    out = {"type": resource_type}
    resource_id = attributes.pop("id", None)
    if resource_id not in (None, ""):
        out["id"] = str(resource_id)
    out["attributes"] = attributes
    return out


def marshal_payload(payload: Union[BaseModel, List[BaseModel], None]) -> Dict[str, Any]:
    if payload is None:
        return {"data": None}
    if isinstance(payload, (list, tuple)):
        return {"data": [_resource(m) for m in payload]}
    return {"data": _resource(payload)}
