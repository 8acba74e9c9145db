"""
Очистить базу данных от тестовых данных (все счета и пользователи)
"""
from bankcore.infrastructure.db.session import get_db
from bankcore.infrastructure.db.models import AccountRecord, UserRecord

db = next(get_db())

print("=== ОЧИСТКА БАЗЫ ДАННЫХ ===")

# Сначала счета, потом владельцы
deleted_accounts = db.query(AccountRecord).delete()
print(f"✓ Удалено счетов: {deleted_accounts}")

deleted_users = db.query(UserRecord).delete()
print(f"✓ Удалено пользователей: {deleted_users}")

db.commit()
print("\n✓ База очищена!")

db.close()
