# src/ghbackup/core/checkpoint/ids.py
"""Hierarchical checkpoint identifiers.

A CheckpointID is a path of tokens from the root of the backup target tree
to one traversal step. Ancestry is tested token by token, so ``issues/open/1``
is never treated as an ancestor of ``issues/open/10``.
"""

from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = "/"


def _check_token(token: str) -> str:
    if not token:
        raise ValueError("checkpoint tokens must be non-empty")
    if SEPARATOR in token or any(ch.isspace() for ch in token):
        raise ValueError(
            f"checkpoint token {token!r} must not contain '{SEPARATOR}' or whitespace"
        )
    return token


@dataclass(frozen=True, order=True)
class CheckpointID:
    """Identity of one step in the backup target tree.

    The empty identifier is the root. Children are built with ``child()``;
    the text form (tokens joined with ``/``) is what the resume marker file
    stores.
    """

    tokens: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for token in self.tokens:
            _check_token(token)

    @classmethod
    def parse(cls, text: str) -> CheckpointID:
        """Rebuild an identifier from its persisted text form."""
        text = text.strip()
        if not text:
            return cls()
        return cls(tuple(text.split(SEPARATOR)))

    def child(self, *suffix: str | int) -> CheckpointID:
        """Identifier of a step nested under this one."""
        return CheckpointID(self.tokens + tuple(str(part) for part in suffix))

    def is_ancestor_of(self, other: CheckpointID) -> bool:
        """True iff this id is a strict prefix of ``other``."""
        return (
            len(self.tokens) < len(other.tokens)
            and other.tokens[: len(self.tokens)] == self.tokens
        )

    def contains(self, other: CheckpointID) -> bool:
        """True iff ``other`` is this id or one of its descendants."""
        return self == other or self.is_ancestor_of(other)

    @property
    def is_root(self) -> bool:
        return not self.tokens

    def __str__(self) -> str:
        return SEPARATOR.join(self.tokens)


ROOT = CheckpointID()
