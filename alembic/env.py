# Alembic 환경: DATABASE_URL 은 app.database 와 같은 값을 사용
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from app.database import DATABASE_URL
from app.models.base import Base
from app.models.match import Match  # noqa: F401  (테이블 메타데이터 등록용)
from app.models.moment import Moment  # noqa: F401
from app.models.user_location import UserLocation  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", DATABASE_URL)

# 앱 기동 중 호출될 때는 앱 로깅 설정을 덮어쓰지 않음
if config.config_file_name is not None and not config.attributes.get("skip_logging_config"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _include_object(obj, name, type_, reflected, compare_to):
    # PostGIS 생성 컬럼(location)과 GIST 인덱스는 ORM 모델에 없으므로 autogenerate 비교에서 제외
    if reflected and compare_to is None and (name == "location" or (name or "").endswith("_location_gist")):
        return False
    return True


def run_migrations_offline() -> None:
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=_include_object,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, include_object=_include_object)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
