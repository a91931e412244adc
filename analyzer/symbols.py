"""
Symbol table with first-seen identifier IDs and inferred type/value.
"""
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

UNKNOWN_TYPE = "unknown"
UNKNOWN_VALUE = "N/A"


class SymbolEntry(BaseModel):
    id: int
    name: str
    data_type: str = UNKNOWN_TYPE
    value: str = UNKNOWN_VALUE

    def row(self) -> Tuple[int, str, str, str]:
        return (self.id, self.name, self.data_type, self.value)


class SymbolTable:
    """
    Registers identifiers in first-seen order.

    IDs start at 1, increase by one per new identifier and are never reused.
    Entries are never deleted; a table lives for a single analysis run.
    Getters return sentinels ("unknown", "N/A", -1) for unknown names.
    """

    def __init__(self):
        self._symbols: Dict[str, SymbolEntry] = {}
        self._next_id = 1

    def add_identifier(self, name: str) -> int:
        """Return the ID of ``name``, allocating the next one if it is new."""
        entry = self._symbols.get(name)
        if entry is None:
            entry = SymbolEntry(id=self._next_id, name=name)
            self._symbols[name] = entry
            self._next_id += 1
        return entry.id

    def set_identifier_info(self, name: str, data_type: str, value: str) -> None:
        entry = self._symbols.get(name)
        if entry is not None:
            entry.data_type = data_type
            entry.value = value

    def lookup(self, name: str) -> Optional[int]:
        entry = self._symbols.get(name)
        return entry.id if entry is not None else None

    def get_id(self, name: str) -> int:
        entry = self._symbols.get(name)
        return entry.id if entry is not None else -1

    def get_data_type(self, name: str) -> str:
        entry = self._symbols.get(name)
        return entry.data_type if entry is not None else UNKNOWN_TYPE

    def get_value(self, name: str) -> str:
        entry = self._symbols.get(name)
        return entry.value if entry is not None else UNKNOWN_VALUE

    def get(self, name: str) -> Optional[SymbolEntry]:
        return self._symbols.get(name)

    def entries(self) -> List[SymbolEntry]:
        """All entries, ascending by ID."""
        return sorted(self._symbols.values(), key=lambda entry: entry.id)

    def rows(self) -> List[Tuple[int, str, str, str]]:
        """Display rows ``(ID, identifier, dataType, value)`` ascending by ID."""
        return [entry.row() for entry in self.entries()]

    def __contains__(self, name):
        return name in self._symbols

    def __len__(self):
        return len(self._symbols)

    def __iter__(self):
        return iter(self.entries())
