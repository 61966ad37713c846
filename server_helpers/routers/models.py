import uuid
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from server_helpers.config import REQUESTER_ID_HEADER
from server_helpers.db.fields import split_delimited
from server_helpers.dependencies import get_session
from server_helpers.models.model import Model
from server_helpers.repositories.model_repository import ModelRepository
from server_helpers.schemas.models import ModelRequest, ModelResponse, TAG_DELIMITER
from server_helpers.server.errors import HandlerError
from server_helpers.server.request_helpers import RequestPipeline

router = APIRouter()
pipeline = RequestPipeline()


def _to_response(model: Model) -> ModelResponse:
    return ModelResponse(id=model.id, name=model.name, tags=model.tags, owner_id=model.owner_id)


def _create_logic(session: Session):
    def create(req: ModelRequest, request: Request):
        repo = ModelRepository(session)
        model_id = req.id or str(uuid.uuid4())
        if repo.get(model_id):
            raise HandlerError(f"Model {model_id} already exists", 409)
        model = repo.create(model_id, req.name, split_delimited(req.tags, TAG_DELIMITER),
                            request.headers.get(REQUESTER_ID_HEADER, ""))
        return _to_response(model), 201
    return create


@router.post("/models")
async def create_model(request: Request, session: Session = Depends(get_session)):
    return await pipeline.handle_json(request, ModelRequest(), _create_logic(session))


@router.post("/models/negotiated")
async def create_model_negotiated(request: Request, session: Session = Depends(get_session)):
    return await pipeline.handle_agnostic(request, ModelRequest(), _create_logic(session))


@router.get("/models")
async def list_models(request: Request, session: Session = Depends(get_session)):
    def logic(_, request: Request):
        repo = ModelRepository(session)
        models = repo.list_for_owner(request.headers.get(REQUESTER_ID_HEADER, ""))
        return [_to_response(m) for m in models], 200

    return await pipeline.handle_agnostic(request, None, logic)


@router.get("/models/{model_id}")
async def get_model(model_id: str, request: Request, session: Session = Depends(get_session)):
    def logic(_, request: Request):
        model = ModelRepository(session).get(model_id)
        if not model:
            raise HandlerError("Model not found", 404)
        return _to_response(model), 200

    return await pipeline.handle_agnostic(request, None, logic)
