import time
from typing import List
from sqlmodel import SQLModel, Field, JSON


class Model(SQLModel, table=True):
    id: str = Field(primary_key=True)
    name: str
    tags: List[str] = Field(default_factory=list, sa_type=JSON)
    owner_id: str = Field(default="", index=True)

    created_at: float = Field(default_factory=time.time)
