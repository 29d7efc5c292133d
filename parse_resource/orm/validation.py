"""
Field-keyed validation messages attached to every record.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple


class ValidationErrors:
    """Ordered mapping of field name to the messages recorded against it."""

    def __init__(self) -> None:
        self._messages: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._messages.setdefault(field, []).append(message)

    def clear(self) -> None:
        self._messages.clear()

    def __getitem__(self, field: str) -> List[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: object) -> bool:
        return field in self._messages

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for field, messages in self._messages.items():
            for message in messages:
                yield field, message

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __bool__(self) -> bool:
        return bool(self._messages)

    def fields(self) -> List[str]:
        return list(self._messages)

    def full_messages(self) -> List[str]:
        """`["username must be unique", ...]`; messages on `base` are not prefixed."""
        return [
            message if field == "base" else f"{field} {message}" for field, message in self
        ]

    def to_dict(self) -> Dict[str, List[str]]:
        return {field: list(messages) for field, messages in self._messages.items()}

    def __repr__(self) -> str:
        return f"ValidationErrors({self.to_dict()!r})"


__all__ = ["ValidationErrors"]
