"""
User Repository - SQLAlchemy adapter for the users table
"""
from sqlalchemy.orm import Session
from sqlalchemy import func

from bankcore.domain.repositories import UserRepository
from bankcore.domain.user import User
from bankcore.infrastructure.db.models import UserRecord


def to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        name=record.name,
        type=record.type,
        number=record.number,
        email=record.email,
        active=record.active
    )


class SqlUserRepository(UserRepository):

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        record = self.db.get(UserRecord, user_id)
        return to_user(record) if record else None

    def register(self, user: User) -> User:
        """
        Сохранить нового пользователя

        Raises:
            ValueError: если id не задан
            IntegrityError: если пользователь с таким id уже есть
        """
        if user.id is None:
            raise ValueError("user id is required to register")

        record = UserRecord(
            id=user.id,
            name=user.name,
            type=user.type,
            number=user.number,
            email=user.email,
            active=user.active
        )
        self.db.add(record)
        self.db.flush()
        return to_user(record)

    def exists(self, user_id: int) -> bool:
        return self.db.query(
            self.db.query(UserRecord).filter(UserRecord.id == user_id).exists()
        ).scalar()

    def next_id(self) -> int:
        return (self.db.query(func.max(UserRecord.id)).scalar() or 0) + 1
