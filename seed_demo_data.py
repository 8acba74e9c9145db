"""
Seed demo users and accounts through the application services.
Run:  python seed_demo_data.py
"""
from decimal import Decimal

from bankcore.application.accounts import AccountService
from bankcore.application.transfers import TransferUseCase
from bankcore.application.users import UserService
from bankcore.domain.account import Account
from bankcore.domain.errors import ConflictError
from bankcore.domain.user import USER_TYPE_BASIC, USER_TYPE_PREMIUM, USER_TYPE_VIP, User
from bankcore.infrastructure.db.session import create_schema, get_session_factory

USERS = [
    User.create(id=1, name="Alice", email="alice@bank.local", type=USER_TYPE_BASIC, number="A-001"),
    User.create(id=2, name="Bob", email="bob@bank.local", type=USER_TYPE_PREMIUM, number="B-002"),
    User.create(id=3, name="Carol", email="carol@bank.local", type=USER_TYPE_VIP, number="C-003"),
]

ACCOUNTS = [
    Account(id=1, owner_id=1, balance=Decimal("500.00")),
    Account(id=2, owner_id=1, balance=Decimal("1500.00")),
    Account(id=3, owner_id=2, balance=Decimal("4200.00")),
    Account(id=4, owner_id=3, balance=Decimal("25000.00")),
]

create_schema()
db = get_session_factory()()

users = UserService(db)
accounts = AccountService(db)

print("=== ПОЛЬЗОВАТЕЛИ ===")
for user in USERS:
    try:
        users.register(user)
        print(f"  ✓ {user.id}: {user.name} ({user.type})")
    except ConflictError:
        print(f"  - {user.id}: уже есть")

print("=== СЧЕТА ===")
for account in ACCOUNTS:
    try:
        accounts.create(account)
        print(f"  ✓ {account.id}: owner={account.owner_id} balance={account.balance}")
    except ConflictError:
        print(f"  - {account.id}: уже есть")

print("=== ПЕРЕВОД ===")
result = TransferUseCase(db).execute(2, 1, Decimal("250.00"))
print(f"  {'✓' if result.success else '✗'} 2 -> 1: {result.message}")

db.close()
print("\n✓ Готово")
