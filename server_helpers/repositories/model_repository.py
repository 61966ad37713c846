from typing import List, Optional
from sqlmodel import select
from server_helpers.repositories.base_repository import BaseRepository
from server_helpers.models.model import Model


class ModelRepository(BaseRepository):
    def get(self, model_id: str) -> Optional[Model]:
        return self.session.get(Model, model_id)

    def create(self, model_id: str, name: str, tags: List[str], owner_id: str) -> Model:
        model = Model(id=model_id, name=name, tags=tags, owner_id=owner_id)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return model

    def list_for_owner(self, owner_id: str) -> List[Model]:
        statement = select(Model).where(Model.owner_id == owner_id).order_by(Model.created_at)
        return list(self.session.exec(statement).all())
