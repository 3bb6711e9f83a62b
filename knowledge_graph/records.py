"""
Paper records and field normalisation.

Record fields arrive as native lists, JSON-encoded strings or bare scalars.
Each field is parsed once into a ``ParsedField`` so the graph builder only
ever sees a list of strings.
"""

import json
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import MalformedField


_WHITESPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class ListField:
    """A field that parsed cleanly into a list of values."""
    items: tuple = ()

    @property
    def malformed(self) -> bool:
        return False

    def as_list(self) -> List[str]:
        return _clean(self.items)


@dataclass(frozen=True)
class RawField:
    """A string that is not valid JSON; kept as a single value."""
    text: str
    error: Optional[MalformedField] = None

    @property
    def malformed(self) -> bool:
        return True

    def as_list(self) -> List[str]:
        return _clean([self.text])


ParsedField = Union[ListField, RawField]


def _clean(values) -> List[str]:
    cleaned = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, (dict, list, tuple)):
            # Nested structures are kept as their JSON text
            text = json.dumps(value, sort_keys=True)
        else:
            text = str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned


def parse_field(value: Any) -> ParsedField:
    """
    Parse a record field into a ListField or RawField.

    Args:
        value: native list/tuple, JSON-encoded string, bare scalar or None

    Returns:
        ListField for anything list-like or scalar, RawField for strings
        that fail to parse as JSON
    """
    if value is None:
        return ListField()

    if isinstance(value, (list, tuple)):
        return ListField(tuple(value))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ListField()
        try:
            parsed = json.loads(text)
        except ValueError as e:
            return RawField(text, MalformedField(f"Unparsable field value {text[:40]!r}: {e}"))
        if parsed is None:
            return ListField()
        if isinstance(parsed, list):
            return ListField(tuple(parsed))
        if isinstance(parsed, str):
            return ListField((parsed,))
        # JSON numbers/booleans/objects: keep the original text
        return ListField((text,))

    return ListField((value,))


def extract_array_field(value: Any) -> List[str]:
    """Normalise any field shape into a list of non-empty strings."""
    return parse_field(value).as_list()


def normalize_name(text: str) -> str:
    """Lowercase and collapse whitespace runs to single underscores."""
    return _WHITESPACE.sub('_', str(text).strip().lower())


def make_node_id(node_type, name: str) -> str:
    """Stable node id derived from (type, normalised name)."""
    type_name = getattr(node_type, 'value', node_type)
    return f"{type_name}_{normalize_name(name)}"


# camelCase keys used by the record source, mapped to attribute names
_FIELD_ALIASES = {
    'anodeMaterials': 'anode_materials',
    'cathodeMaterials': 'cathode_materials',
    'organismTypes': 'organism_types',
    'systemType': 'system_type',
    'publicationDate': 'publication_date',
}


@dataclass
class PaperRecord:
    """One bibliographic record; every field is optional."""
    id: Any = None
    title: Optional[str] = None
    authors: Any = None
    anode_materials: Any = None
    cathode_materials: Any = None
    organism_types: Any = None
    keywords: Any = None
    system_type: Any = None
    journal: Optional[str] = None
    doi: Optional[str] = None
    publication_date: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PaperRecord':
        """Build a record from a camelCase or snake_case mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, record: Any) -> 'PaperRecord':
        if isinstance(record, cls):
            return record
        if isinstance(record, Mapping):
            return cls.from_dict(record)
        raise TypeError(f"Cannot interpret {type(record).__name__} as a paper record")

    def parsed_fields(self) -> Dict[str, ParsedField]:
        """Parse every list-like field once."""
        return {
            'authors': parse_field(self.authors),
            'anode_materials': parse_field(self.anode_materials),
            'cathode_materials': parse_field(self.cathode_materials),
            'organism_types': parse_field(self.organism_types),
            'keywords': parse_field(self.keywords),
        }

    def system_type_label(self) -> Optional[str]:
        values = extract_array_field(self.system_type)
        return values[0] if values else None
