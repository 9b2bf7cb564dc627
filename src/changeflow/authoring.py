"""Author identities and authoring policies.

An authoring policy maps the author recorded in the origin history to the
identity that is allowed to appear in the destination.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_AUTHOR_RE = re.compile(r"^\s*(?P<name>[^<>]*?)\s*<(?P<email>[^<>]*)>\s*$")


class AuthorParseError(ValueError):
    """Raised when a string is not in ``Name <email>`` form."""


@dataclass(frozen=True)
class Author:
    """A committer identity.

    Attributes:
        name: Display name
        email: Contact address
    """

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    @classmethod
    def parse(cls, value: str) -> Author:
        """Parse an author in the conventional git ``Name <email>`` form.

        Args:
            value: Author string

        Returns:
            Author instance

        Raises:
            AuthorParseError: If the string is not well formed
        """
        match = _AUTHOR_RE.match(value)
        if match is None:
            raise AuthorParseError(f"Invalid author '{value}'. Expected format: 'Name <email>'")
        return cls(name=match.group("name"), email=match.group("email"))


@runtime_checkable
class AuthoringPolicy(Protocol):
    """Anything that can resolve an original author to a destination author."""

    def resolve(self, author: Author) -> Author: ...


class AuthoringMode(Enum):
    """How the bundled policy treats original authors."""

    PASS_THRU = "pass_thru"  # Keep the original author
    OVERWRITE = "overwrite"  # Always use the default author
    ALLOWED = "allowed"  # Keep allow-listed authors, default otherwise


@dataclass(frozen=True)
class Authoring:
    """Configured authoring policy.

    The mapping table is consulted first, keyed by ``Name <email>`` or bare
    email. The mode rule is then applied to the mapped author.

    Attributes:
        mode: Resolution mode
        default_author: Fallback identity for OVERWRITE and ALLOWED
        allowlist: Emails or ``Name <email>`` strings kept under ALLOWED
        mapping: Author rewrite table applied before the mode rule
    """

    mode: AuthoringMode = AuthoringMode.PASS_THRU
    default_author: Author | None = None
    allowlist: frozenset[str] = field(default_factory=frozenset)
    mapping: Mapping[str, Author] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.mode is not AuthoringMode.PASS_THRU and self.default_author is None:
            raise ValueError(f"Authoring mode '{self.mode.value}' requires a default author")
        object.__setattr__(self, "allowlist", frozenset(self.allowlist))
        object.__setattr__(self, "mapping", dict(self.mapping))

    @classmethod
    def pass_thru(cls, mapping: Mapping[str, Author] | None = None) -> Authoring:
        return cls(AuthoringMode.PASS_THRU, mapping=mapping or {})

    @classmethod
    def overwrite(cls, default_author: Author) -> Authoring:
        return cls(AuthoringMode.OVERWRITE, default_author=default_author)

    @classmethod
    def allowed(
        cls,
        default_author: Author,
        allowlist: Iterable[str],
        mapping: Mapping[str, Author] | None = None,
    ) -> Authoring:
        return cls(
            AuthoringMode.ALLOWED,
            default_author=default_author,
            allowlist=frozenset(allowlist),
            mapping=mapping or {},
        )

    def resolve(self, author: Author) -> Author:
        """Resolve an original author according to this policy.

        Args:
            author: Author as recorded in the origin

        Returns:
            Author to expose downstream
        """
        mapped = lookup_author(self.mapping, author)
        if mapped is not None:
            author = mapped

        if self.mode is AuthoringMode.PASS_THRU:
            return author

        # __post_init__ guarantees a default for the remaining modes
        assert self.default_author is not None

        if self.mode is AuthoringMode.OVERWRITE:
            return self.default_author

        if author.email in self.allowlist or str(author) in self.allowlist:
            return author

        logger.debug("Author '%s' not in allowlist, using '%s'", author, self.default_author)
        return self.default_author


def lookup_author(table: Mapping[str, Author], author: Author) -> Author | None:
    """Find an author in a rewrite table keyed by ``Name <email>`` or email."""
    found = table.get(str(author))
    if found is None:
        found = table.get(author.email)
    return found
