"""
Создать таблицы и индексы в базе (без миграций)
Run:  python init_db.py
"""
from sqlalchemy.engine import make_url

from bankcore.config import get_settings
from bankcore.infrastructure.db.session import create_schema

settings = get_settings()
print(f"=== СОЗДАНИЕ СХЕМЫ: {make_url(settings.get_sqlalchemy_url()).render_as_string(hide_password=True)} ===")

create_schema()

print("✓ Таблицы accounts, users и индексы созданы")
