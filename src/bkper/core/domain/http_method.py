"""HTTP verbs accepted by the request executor."""

from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    """Supported REST verbs."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, value: "HttpMethod | str") -> "HttpMethod":
        """Accept an enum member or a case-insensitive verb name."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {value!r}") from None
