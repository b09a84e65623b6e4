# assetstore/interner.py
"""
String interning for group and category names.

Each distinct string gets a dense 1-based id. Id 0 is reserved for
"absent". Ids are assigned in order and never reused, so a name always
resolves to the id it was first given.
"""

import logging
from typing import Dict, Iterator, List, Tuple

from .errors import NotFoundError, OutOfRangeError, ValidationError
from .validator import Validator

logger = logging.getLogger(__name__)


class StringInterner:
    """
    Bidirectional name <-> id table.

    Structure:
        _names: [name_1, name_2, ...]   # id - 1 -> name
        _ids:   {name: id}              # reverse lookup
    """

    def __init__(self, namespace: str = ""):
        self.namespace = namespace
        self._names: List[str] = []
        self._ids: Dict[str, int] = {}

    def check(self, name: str, validator: Validator) -> None:
        """
        Raise ValidationError if name is new and fails validation.

        Does not modify the table.
        """
        if name in self._ids:
            return
        if not validator.validate_str(name):
            raise ValidationError(f"Invalid {self.namespace or 'name'}: {name!r}")

    def intern_or_create(self, name: str, validator: Validator) -> Tuple[int, bool]:
        """
        Get the id for name, creating one if needed.

        Names already present are returned without validation.

        Returns:
            (id, created)
        """
        existing = self._ids.get(name)
        if existing is not None:
            return existing, False

        self.check(name, validator)
        self._names.append(name)
        new_id = len(self._names)
        self._ids[name] = new_id
        logger.debug(f"Interned {self.namespace} {name!r} as {new_id}")
        return new_id, True

    def id_of(self, name: str) -> int:
        try:
            return self._ids[name]
        except KeyError:
            raise NotFoundError(f"Unknown {self.namespace or 'name'}: {name!r}") from None

    def get_id(self, name: str) -> int:
        """Return the id for name, or 0 if it was never interned."""
        return self._ids.get(name, 0)

    def count(self) -> int:
        return len(self._names)

    def name_at(self, index: int) -> str:
        """Get the name at a 0-based index (id - 1)."""
        if index < 0 or index >= len(self._names):
            raise OutOfRangeError(
                f"{self.namespace or 'name'} index {index} out of range "
                f"(count {len(self._names)})"
            )
        return self._names[index]

    def name_of(self, string_id: int) -> str:
        """Get the name for a 1-based id."""
        if string_id < 1 or string_id > len(self._names):
            raise NotFoundError(f"Unknown {self.namespace or 'name'} id: {string_id}")
        return self._names[string_id - 1]

    def to_list(self) -> List[str]:
        return list(self._names)

    @classmethod
    def from_list(cls, names: List[str], namespace: str = "") -> "StringInterner":
        """Restore a table; names[i] gets id i + 1."""
        interner = cls(namespace)
        for name in names:
            if name in interner._ids:
                raise ValueError(f"Duplicate {namespace or 'name'} in table: {name!r}")
            interner._names.append(name)
            interner._ids[name] = len(interner._names)
        return interner

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)
