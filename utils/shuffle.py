"""Детерминированное перемешивание колоды: одинаковый seed даёт одинаковый порядок на всех устройствах."""
import math
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")

# Генератор Лемера (Park–Miller) с модулем 2^35 - 31
MODULUS = 2 ** 35 - 31
MULTIPLIER = 185852


def seeded_random(seed: int) -> Callable[[], float]:
    """Возвращает генератор чисел в [0, 1), полностью определяемый seed."""
    state = seed % MODULUS

    def next_value() -> float:
        nonlocal state
        state = (state * MULTIPLIER) % MODULUS
        return state / MODULUS

    return next_value


def shuffle(items: Sequence[T], seed: int) -> List[T]:
    """
    Перемешивание Фишера–Йетса от последнего индекса к первому.
    Вход не изменяется, возвращается новый список.
    """
    rng = seeded_random(seed)
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = math.floor(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result
