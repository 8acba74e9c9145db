"""
User domain entity
"""
from dataclasses import dataclass

from bankcore.domain.errors import InvalidArgumentError

# User types (free string, these are the ones the bank uses today)
USER_TYPE_BASIC = "BASIC"
USER_TYPE_PREMIUM = "PREMIUM"
USER_TYPE_VIP = "VIP"


@dataclass(frozen=True)
class User:
    """
    Bank customer

    Прямой конструктор ничего не проверяет (так приходят записи из БД).
    Новых пользователей создавать через User.create().
    """
    id: int | None
    name: str | None
    type: str | None
    number: str | None
    email: str | None
    active: bool = True

    @staticmethod
    def create(
        name: str | None,
        email: str | None,
        type: str | None = USER_TYPE_BASIC,
        number: str | None = None,
        id: int | None = None,
        active: bool = True
    ) -> "User":
        """
        Создать пользователя с проверкой данных

        Args:
            name: Имя (не может быть пустым)
            email: Email (должен содержать @)
            type: Тип клиента (BASIC, PREMIUM, VIP)
            number: Номер документа
            id: ID пользователя (> 0), None - назначит хранилище
            active: Активен ли пользователь

        Returns:
            User

        Raises:
            InvalidArgumentError: если имя пустое, email без @ или id <= 0
        """
        if name is None or not name.strip():
            raise InvalidArgumentError("name cannot be empty")
        if email is None or "@" not in email:
            raise InvalidArgumentError("email must contain @")
        if id is not None and id <= 0:
            raise InvalidArgumentError("user id must be greater than 0")

        return User(
            id=id,
            name=name.strip(),
            type=type,
            number=number,
            email=email,
            active=active
        )
