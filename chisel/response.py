from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.exceptions import ParserRejectedMarkup

from .models import RawResponse


@dataclass(frozen=True)
class Response:
    """Read-only, normalized view of one HTTP response.

    Built by the runner from a transport's RawResponse; modules only ever
    receive it. ``json`` and ``html`` are parsed on first access and are
    ``None`` when the body does not look like that format.
    """

    headers: Mapping[str, Tuple[str, ...]]
    status_code: int
    reason: str
    content: str

    @classmethod
    def from_raw(cls, raw: RawResponse) -> "Response":
        return cls(
            headers=_group_headers(raw.headers),
            status_code=int(raw.status_code),
            reason=raw.reason or "",
            content=raw.text or "",
        )

    def header(self, name: str) -> Optional[str]:
        """First value of a header, looked up case-insensitively."""
        lowered = name.lower()
        for key, values in self.headers.items():
            if key.lower() == lowered and values:
                return values[0]
        return None

    @cached_property
    def json(self) -> Any:
        try:
            return json.loads(self.content)
        except (ValueError, RecursionError):
            return None

    @cached_property
    def html(self) -> Optional[BeautifulSoup]:
        # html.parser does not invent <html>/<body> wrappers, so plain text stays plain.
        try:
            doc = BeautifulSoup(self.content, "html.parser")
        except ParserRejectedMarkup:
            return None
        if doc.select_one("html > head, html > body") is None:
            return None
        return doc

    def __str__(self) -> str:
        return f"{self.status_code} {self.reason}".rstrip()


def _group_headers(pairs: Iterable[Tuple[str, str]]) -> Mapping[str, Tuple[str, ...]]:
    grouped: Dict[str, List[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return MappingProxyType({name: tuple(values) for name, values in grouped.items()})
