"""Virtual path resolution for SSI include directives."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union


@dataclass(frozen=True)
class PrefixRule:
    """Maps a virtual path prefix onto a physical base directory.

    Args:
        virtual_prefix: Leading part of a virtual path (e.g. '/special/supersale/202509/')
        physical_base: Directory the remainder of the path is joined onto
    """

    virtual_prefix: str
    physical_base: Path


@dataclass(frozen=True)
class Resolved:
    """The virtual path maps to an existing local file."""

    virtual_path: str
    physical_path: Path


@dataclass(frozen=True)
class UnresolvableExternal:
    """No prefix rule matches; the file lives outside the preview checkout."""

    virtual_path: str


@dataclass(frozen=True)
class LocalFileMissing:
    """A prefix rule matches but the computed file does not exist."""

    virtual_path: str
    physical_path: Path


ResolutionOutcome = Union[Resolved, UnresolvableExternal, LocalFileMissing]


class VirtualPathResolver:
    """Classifies virtual include paths against an ordered prefix rule table.

    The first rule whose prefix starts the virtual path wins. Classification
    is total: every input string yields an outcome and nothing is raised.
    """

    def __init__(self, rules: Sequence[PrefixRule]) -> None:
        """Initialize the resolver.

        Args:
            rules: Ordered prefix rules, earlier rules shadow later ones
        """
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[PrefixRule, ...]:
        return self._rules

    def resolve(self, virtual_path: str) -> ResolutionOutcome:
        """Resolve a virtual path to a physical file location.

        Only checks existence; the file is never opened here.

        Args:
            virtual_path: Path exactly as captured from the directive

        Returns:
            Resolved, LocalFileMissing or UnresolvableExternal
        """
        for rule in self._rules:
            if not virtual_path.startswith(rule.virtual_prefix):
                continue

            # a leading slash would make the join absolute
            remainder = virtual_path[len(rule.virtual_prefix):].lstrip("/")
            physical_path = rule.physical_base / remainder
            if os.path.exists(physical_path):
                return Resolved(virtual_path, physical_path)
            return LocalFileMissing(virtual_path, physical_path)

        return UnresolvableExternal(virtual_path)
