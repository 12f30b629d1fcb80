"""
Сборка общей колоды комнаты.

Колода никогда не пересылается между клиентами: каждый собирает её сам из
постраничной выдачи каталога и seed комнаты. Страница перемешивается своим
seed (seed комнаты + номер страницы), поэтому порядок внутри страницы одинаков
у всех, сколько бы страниц ни успел загрузить конкретный клиент.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Collection, List, Mapping, Optional, Protocol, Sequence, Tuple

from models.room import Room
from utils.shuffle import MODULUS, shuffle

logger = logging.getLogger(__name__)

DEFAULT_REGION = "US"


@dataclass(frozen=True)
class DiscoverFilters:
    media_type: str
    genre_ids: Tuple[int, ...] = ()
    region: Optional[str] = None
    provider_ids: Tuple[int, ...] = ()

    @classmethod
    def from_room(cls, room: Room) -> "DiscoverFilters":
        return cls(
            media_type=room.media_type,
            genre_ids=tuple(room.genre_ids or ()),
            region=room.region or DEFAULT_REGION,
            provider_ids=tuple(room.provider_ids or ()),
        )


class CatalogQuery(Protocol):
    """Внешний каталог фильмов. Ядру нужен только id элемента."""

    async def discover(self, page: int, filters: DiscoverFilters) -> Sequence[Any]:
        ...


@dataclass
class Deck:
    item_ids: List[int] = field(default_factory=list)
    next_page: int = 1
    exhausted: bool = False


def room_seed(room: Room) -> int:
    """Целочисленный seed перемешивания из хранимого float в [0, 1)."""
    seed = int(room.random_seed * MODULUS)
    if seed == 0:
        seed = int(room.created_at.timestamp() * 1000)
    return seed


def page_seed(seed: int, page: int) -> int:
    return seed + page


def item_id(item: Any) -> int:
    if isinstance(item, Mapping):
        return int(item["id"])
    return int(item.id)


def shuffle_page(items: Sequence[Any], seed: int, page: int) -> List[int]:
    # Дубликаты внутри страницы убираем до перемешивания, порядок каталога сохраняется
    ids = list(dict.fromkeys(item_id(item) for item in items))
    return shuffle(ids, page_seed(seed, page))


async def build_deck(
    catalog: CatalogQuery,
    room: Room,
    seen: Collection[int] = (),
    *,
    start_page: int = 1,
    max_pages: int = 10,
    min_unseen: int = 5,
) -> Deck:
    """
    Грузим страницы по порядку, пока не наберём min_unseen непросмотренных
    элементов или не упрёмся в max_pages. max_pages это номер последней
    страницы включительно: при значениях по умолчанию запрашиваются страницы 1..10.
    Пустая страница означает конец каталога.
    """
    seed = room_seed(room)
    filters = DiscoverFilters.from_room(room)
    seen_ids = set(seen)
    deck = Deck(next_page=start_page)

    while len(deck.item_ids) < min_unseen and deck.next_page <= max_pages:
        page = deck.next_page
        results = await catalog.discover(page, filters)
        deck.next_page = page + 1
        if not results:
            deck.exhausted = True
            break
        for candidate in shuffle_page(results, seed, page):
            if candidate not in seen_ids and candidate not in deck.item_ids:
                deck.item_ids.append(candidate)

    if deck.next_page > max_pages and len(deck.item_ids) == 0:
        deck.exhausted = True

    logger.debug(
        "Deck for room %s: %d items, next page %d", room.id, len(deck.item_ids), deck.next_page
    )
    return deck


def is_finished(vote_count: int, limit: Optional[int], deck_exhausted: bool = False) -> bool:
    """Конечное состояние finished не хранится: его выводит клиент."""
    if limit is not None and vote_count >= limit:
        return True
    return deck_exhausted
