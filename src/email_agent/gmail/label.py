"""Gmail labels: a small value type plus the system labels we touch."""

from __future__ import annotations


class Label:
    """A Gmail label.

    System labels use their name as id (``INBOX``); user labels get an
    opaque id (``Label_42``). Equality is by id, and a label compares equal
    to its id string so ``"UNREAD" in message.labels`` works either way.

    Args:
        name: the display name of the label.
        id: the Gmail label id.
    """

    def __init__(self, name: str, id: str) -> None:
        self.name = name
        self.id = id

    def __repr__(self) -> str:
        return f'Label(name={self.name!r}, id={self.id!r})'

    def __str__(self) -> str:
        return self.name

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other) -> bool:
        if isinstance(other, str):
            return self.id == other
        if isinstance(other, Label):
            return self.id == other.id
        return NotImplemented

    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison, as Gmail treats label names."""
        return self.name.lower() == name.lower()


INBOX = Label('INBOX', 'INBOX')
UNREAD = Label('UNREAD', 'UNREAD')
STARRED = Label('STARRED', 'STARRED')
