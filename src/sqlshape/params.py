"""Placeholder value substitution."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlshape.tokens import Token

Params = Mapping[str, Any] | Sequence[Any]


class PlaceholderResolver:
    """Look up substitution text for placeholder tokens.

    Named placeholders (``:id``, ``@id``) and indexed ones (``?2``) use the
    token key; bare ``?`` markers consume positional values in order.
    Anything that cannot be resolved is returned as its original text.
    """

    def __init__(self, params: Params | None = None) -> None:
        self._params = params
        self._index = 0

    def resolve(self, token: Token) -> str:
        if self._params is None:
            return token.value

        if isinstance(self._params, Mapping):
            if token.key is not None and token.key in self._params:
                return str(self._params[token.key])
            return token.value

        if isinstance(self._params, (str, bytes)):
            return token.value

        if token.key is not None:
            if token.key.isdigit() and int(token.key) < len(self._params):
                return str(self._params[int(token.key)])
            return token.value

        if self._index < len(self._params):
            value = self._params[self._index]
            self._index += 1
            return str(value)
        return token.value
