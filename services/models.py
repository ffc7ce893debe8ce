from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import NetworkError

MAX_BASE_STAT = 255
MODAL_MOVE_LIMIT = 10


def display_name(name: str) -> str:
    """Capitalize the first letter only ("mr-mime" -> "Mr-mime")."""
    if not name:
        return ''
    return name[0].upper() + name[1:]


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    reference: str

    def to_json(self):
        return {'name': self.name, 'url': self.reference}


@dataclass(frozen=True)
class Stat:
    name: str
    value: int

    @property
    def percent(self) -> float:
        return self.value / MAX_BASE_STAT * 100


@dataclass
class FullRecord:
    name: str
    id: int
    categories: List[str]
    height: int
    weight: int
    stats: List[Stat] = field(default_factory=list)
    moves: List[str] = field(default_factory=list)
    species_reference: str = ''
    thumbnail_url: Optional[str] = None

    @classmethod
    def from_api(cls, data) -> 'FullRecord':
        """Build a record from a raw /pokemon/{name} payload.
        Raises NetworkError when required keys are missing or there are no types,
        since such a payload cannot be displayed.
        """
        if not isinstance(data, dict):
            raise NetworkError('Detail payload is not an object')
        try:
            types = sorted(data['types'], key=lambda t: t.get('slot', 0))
            categories = [t['type']['name'] for t in types]
            if not categories:
                raise NetworkError(f"Detail payload for {data.get('name')} has no types")
            stats = [Stat(s['stat']['name'], int(s['base_stat'])) for s in data.get('stats') or []]
            moves = [m['move']['name'] for m in data.get('moves') or []]
            return cls(
                name=data['name'],
                id=int(data['id']),
                categories=categories,
                height=data.get('height') or 0,
                weight=data.get('weight') or 0,
                stats=stats,
                moves=moves,
                species_reference=(data.get('species') or {}).get('url') or '',
                thumbnail_url=(data.get('sprites') or {}).get('front_default'),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise NetworkError(f'Malformed detail payload: {e!r}') from e

    @property
    def primary_category(self) -> str:
        return self.categories[0]

    @property
    def display_name(self) -> str:
        return display_name(self.name)

    @property
    def height_m(self) -> float:
        # API reports decimetres
        return self.height / 10

    @property
    def weight_kg(self) -> float:
        # API reports hectograms
        return self.weight / 10

    def top_moves(self, limit: int = MODAL_MOVE_LIMIT) -> List[str]:
        return [display_name(m).replace('-', ' ', 1) for m in self.moves[:limit]]

    def to_json(self):
        return {
            'name': self.name,
            'display_name': self.display_name,
            'id': self.id,
            'sprite': self.thumbnail_url,
            'types': list(self.categories),
            'height_m': self.height_m,
            'weight_kg': self.weight_kg,
            'stats': [
                {'name': s.name, 'label': display_name(s.name), 'value': s.value,
                 'percent': round(s.percent, 2)}
                for s in self.stats
            ],
            'moves': self.top_moves(),
            'species_url': self.species_reference,
        }


@dataclass(frozen=True)
class MinimalRecord:
    name: str
    thumbnail_url: Optional[str]
    primary_category: str

    @classmethod
    def from_full(cls, full: FullRecord) -> 'MinimalRecord':
        return cls(name=full.name, thumbnail_url=full.thumbnail_url,
                   primary_category=full.primary_category)

    def to_card(self):
        return {
            'name': self.name,
            'display_name': display_name(self.name),
            'sprite': self.thumbnail_url,
            'type': self.primary_category,
        }


@dataclass(frozen=True)
class EvolutionStage:
    name: str
    thumbnail_url: Optional[str] = None

    def to_json(self):
        return {'name': self.name, 'display_name': display_name(self.name),
                'sprite': self.thumbnail_url}
