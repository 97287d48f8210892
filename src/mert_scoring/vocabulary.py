from __future__ import annotations


class Vocabulary:
    """
    Maps token strings to dense integer IDs.

    IDs are assigned in first-seen order starting from 0 and never change.
    The vocabulary only grows; there is no way to remove a token.
    """

    def __init__(self):
        self._ids: dict[str, int] = {}
        self._tokens: list[str] = []

    def encode(self, token: str) -> int:
        """Return the ID of ``token``, assigning a new one if unseen."""
        token_id = self._ids.get(token)
        if token_id is None:
            token_id = len(self._tokens)
            self._ids[token] = token_id
            self._tokens.append(token)
        return token_id

    def lookup(self, token: str) -> int | None:
        """Return the ID of ``token`` without inserting it."""
        return self._ids.get(token)

    def decode(self, token_id: int) -> str:
        if not 0 <= token_id < len(self._tokens):
            raise IndexError(f"Unknown token id: {token_id}")
        return self._tokens[token_id]

    def __contains__(self, token: object) -> bool:
        return token in self._ids

    def __len__(self) -> int:
        return len(self._tokens)
