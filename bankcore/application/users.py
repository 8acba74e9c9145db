"""
User use cases - register and look up bank customers
"""
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from bankcore.application.store_errors import store_errors
from bankcore.domain.errors import ConflictError, NotFoundError
from bankcore.domain.repositories import UserRepository
from bankcore.domain.user import User
from bankcore.infrastructure.db.repositories.users import SqlUserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations"""

    def __init__(self, db: Session, users: UserRepository | None = None):
        self.db = db
        self.users = users or SqlUserRepository(db)

    def register(self, user: User) -> User:
        """
        Зарегистрировать пользователя

        Args:
            user: Пользователь, созданный через User.create() (id можно не указывать)

        Returns:
            Сохранённый User

        Raises:
            ConflictError: если пользователь с таким id уже есть
        """
        logger.info("Registering user %s", user.name)

        with store_errors(self.db, "register user"):
            if user.id is None:
                user = User(
                    id=self.users.next_id(),
                    name=user.name,
                    type=user.type,
                    number=user.number,
                    email=user.email,
                    active=user.active
                )
            elif self.users.exists(user.id):
                raise ConflictError("user already exists")

            try:
                saved = self.users.register(user)
                self.db.commit()
            except IntegrityError as exc:
                # параллельный запрос успел вставить тот же id между exists() и commit
                logger.info("User %s inserted concurrently: %s", user.id, exc.orig)
                raise ConflictError("user already exists") from exc

        return saved

    def get_by_id(self, user_id: int) -> User:
        with store_errors(self.db, "read user"):
            user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        return user

    def exists(self, user_id: int) -> bool:
        with store_errors(self.db, "check user"):
            return self.users.exists(user_id)
