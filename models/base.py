from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base
from sqlalchemy import event
from core.id_generator import generate_random_id

# Общий Base для всех моделей
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@event.listens_for(Base, "before_insert", propagate=True)
def assign_random_id(mapper, connection, target):
    if getattr(target, "id", None) is None:
        entity = target.__tablename__
        target.id = generate_random_id(entity)


# Верхние границы Integer и BigInteger: всё, что больше, драйвер не примет
MAX_INT = 2**31 - 1
MAX_BIGINT = 2**63 - 1
