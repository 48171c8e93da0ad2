from sqlalchemy import func, or_, select

from dailysync.app.models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db):
        super().__init__(db, User)

    def get_by_email(self, email: str):
        result = self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    def search(self, search: str = "", offset: int = 0, limit: int = 10):
        """
        Paginated user list, newest first. Returns (users, total).
        """
        criteria = []
        if search:
            pattern = f"%{search}%"
            criteria.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        total = self.count(*criteria)
        stmt = select(User).order_by(User.created_at.desc()).offset(offset).limit(limit)
        if criteria:
            stmt = stmt.where(*criteria)
        return self.db.execute(stmt).scalars().all(), total
