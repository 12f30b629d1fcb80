import random

# Двухзначные коды сущностей
TYPE_POSTFIX = {
    "rooms": 11,
    "room_members": 12,
    "swipes": 13,
    "room_matches": 14,
}


def generate_random_id(entity: str) -> int:
    """Возвращает id: 9 случайных цифр + 2-значный постфикс сущности."""
    if entity not in TYPE_POSTFIX:
        raise ValueError(f"Unknown entity for ID generation: {entity}")
    rand9 = random.randint(0, 999_999_999)
    postfix = TYPE_POSTFIX[entity]
    return rand9 * 100 + postfix
