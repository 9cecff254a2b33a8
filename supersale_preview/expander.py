"""Recursive expansion of SSI include directives.

Only the virtual-path include form is recognised:

    <!--#include virtual="/special/supersale/202509/parts/header.html"-->

Every other SSI directive passes through untouched.
"""

import re
from pathlib import Path
from typing import Optional

from . import config
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, log_diagnostic
from .resolver import LocalFileMissing, Resolved, UnresolvableExternal, VirtualPathResolver

INCLUDE_PATTERN = re.compile(r'<!--#include\s+virtual="([^"]+)"\s*-->')

EXTERNAL_PLACEHOLDER = "<!-- SSI not found (external resource): {path} -->"
LOCAL_MISSING_PLACEHOLDER = "<!-- SSI not found (local file): {path} -->"
READ_ERROR_PLACEHOLDER = "<!-- SSI read error: {path} -->"


class IncludeExpander:
    """Inlines SSI fragments into a document.

    Each directive is resolved through the resolver and replaced by the
    expanded fragment or by a placeholder comment. Fragments are expanded
    recursively relative to their own directory. Recursion stops once the
    depth exceeds ``max_depth``; an include cycle therefore inlines until the
    limit and then leaves the directive as literal text.

    Nothing is raised to the caller and no state is kept between calls.
    """

    def __init__(
        self,
        resolver: VirtualPathResolver,
        on_diagnostic: DiagnosticSink = log_diagnostic,
        max_depth: int = config.MAX_INCLUDE_DEPTH,
    ) -> None:
        """Initialize the expander.

        Args:
            resolver: Resolver for virtual include paths
            on_diagnostic: Sink receiving one diagnostic per processed directive
            max_depth: Deepest nesting level that is still expanded
        """
        self.resolver = resolver
        self.on_diagnostic = on_diagnostic
        self.max_depth = max_depth

    def expand(self, text: str, current_dir: Path, depth: int = 0) -> str:
        """Expand every include directive in ``text``.

        Args:
            text: Document or fragment content
            current_dir: Directory the text was loaded from
            depth: Nesting level, 0 for the requested document

        Returns:
            The text with all directives substituted
        """
        if depth > self.max_depth:
            self.on_diagnostic(
                Diagnostic(DiagnosticKind.DEPTH_EXCEEDED, None, str(current_dir), depth)
            )
            return text

        def substitute(match: re.Match[str]) -> str:
            return self._expand_directive(match.group(1), depth)

        return INCLUDE_PATTERN.sub(substitute, text)

    def _expand_directive(self, virtual_path: str, depth: int) -> str:
        """Produce the replacement text for a single directive."""
        outcome = self.resolver.resolve(virtual_path)

        if isinstance(outcome, UnresolvableExternal):
            self._emit(DiagnosticKind.UNRESOLVABLE_EXTERNAL, virtual_path, None, depth)
            return EXTERNAL_PLACEHOLDER.format(path=virtual_path)

        if isinstance(outcome, LocalFileMissing):
            physical = str(outcome.physical_path)
            self._emit(DiagnosticKind.LOCAL_FILE_MISSING, virtual_path, physical, depth)
            return LOCAL_MISSING_PLACEHOLDER.format(path=physical)

        return self._expand_fragment(outcome, depth)

    def _expand_fragment(self, outcome: Resolved, depth: int) -> str:
        """Read a resolved fragment and expand it relative to its own directory."""
        virtual_path = outcome.virtual_path
        try:
            data = outcome.physical_path.read_bytes()
        except OSError as e:
            # also covers the file vanishing after the existence check
            self._emit(DiagnosticKind.READ_FAILURE, virtual_path, str(e), depth)
            return READ_ERROR_PLACEHOLDER.format(path=virtual_path)

        # undecodable bytes become U+FFFD, the fragment is still inlined
        fragment = data.decode("utf-8", errors="replace")
        self._emit(DiagnosticKind.INCLUDED, virtual_path, str(outcome.physical_path), depth)
        return self.expand(fragment, outcome.physical_path.parent, depth + 1)

    def _emit(
        self, kind: DiagnosticKind, virtual_path: str, detail: Optional[str], depth: int
    ) -> None:
        self.on_diagnostic(Diagnostic(kind, virtual_path, detail, depth))
