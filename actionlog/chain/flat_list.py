"""
Client-side copy of the flattened LIFO action list.

Only the commitment (``hash``) lives on-chain; whoever drains the list keeps
the links here and pops them in batches.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .field import Field, FieldLike, to_field
from .hashing import EMPTY_FLAT_LIST_HASH, flat_list_add


@dataclass(frozen=True)
class FlatListLink:
    """One node of the flattened list: an action and the commitment below it."""
    tail: Field
    action: Field

    @property
    def is_dummy(self) -> bool:
        return self.action.is_zero()

    def to_dict(self) -> dict:
        return {"tail": int(self.tail), "action": int(self.action)}

    @classmethod
    def from_dict(cls, data: dict) -> "FlatListLink":
        return cls(tail=Field(data["tail"]), action=Field(data["action"]))


DUMMY_LINK = FlatListLink(tail=Field.zero(), action=Field.zero())


class FlatActionList:
    """LIFO list whose ``hash`` matches the flatten engine's ``flat_list_state``."""

    def __init__(self):
        self.hash: Field = EMPTY_FLAT_LIST_HASH
        self._links: List[FlatListLink] = []

    def __len__(self) -> int:
        return len(self._links)

    def is_empty(self) -> bool:
        return not self._links

    def push(self, action: FieldLike) -> Field:
        link = FlatListLink(tail=self.hash, action=to_field(action))
        self._links.append(link)
        self.hash = flat_list_add(link.tail, link.action)
        return self.hash

    def pop(self) -> FlatListLink:
        """Remove the most recent action; the new hash is the link's tail."""
        if not self._links:
            raise IndexError("pop from empty flat list")
        link = self._links.pop()
        self.hash = link.tail
        return link

    def actions(self) -> Tuple[Field, ...]:
        """Actions in push order."""
        return tuple(link.action for link in self._links)

    def copy(self) -> "FlatActionList":
        other = FlatActionList()
        other.hash = self.hash
        other._links = list(self._links)
        return other
