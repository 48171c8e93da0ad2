from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dailysync.app.db import safe_commit

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get(self, id: str) -> Optional[ModelType]:
        return self.db.get(self.model, id)

    def count(self, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return int(self.db.execute(stmt).scalar() or 0)

    def create(self, obj_data: dict) -> ModelType:
        obj = self.model(**obj_data)
        self.db.add(obj)
        safe_commit(self.db)
        self.db.refresh(obj)
        return obj

    def update(self, obj: ModelType, update_data: dict) -> ModelType:
        for field, value in update_data.items():
            setattr(obj, field, value)
        self.db.add(obj)
        safe_commit(self.db)
        self.db.refresh(obj)
        return obj

    def delete(self, obj: ModelType):
        self.db.delete(obj)
        safe_commit(self.db)
        return True
