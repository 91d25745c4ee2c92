"""Symbolic node name to live node identity table."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from faultline.errors import UnknownNodeError

NodeId = TypeVar("NodeId")


class NodeRegistry(Generic[NodeId]):
    """Maps stable symbolic names (node_1, node_2, ...) to live identities.

    Created by the driver at run setup and handed to every injector call.
    """

    def __init__(self, entries: dict[str, NodeId] | None = None):
        self._entries: dict[str, NodeId] = dict(entries or {})

    def register(self, name: str, identity: NodeId) -> None:
        """Add or update a node."""
        self._entries[name] = identity

    def resolve(self, name: str) -> NodeId:
        """Get the live identity for a symbolic name.

        Raises:
            UnknownNodeError: If the name was never registered
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownNodeError(name) from None

    @property
    def names(self) -> list[str]:
        """Registered symbolic names, in registration order."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"NodeRegistry({self._entries!r})"
