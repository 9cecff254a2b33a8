"""Diagnostic records emitted while expanding SSI includes."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import structlog

logger = structlog.get_logger(__name__)


class DiagnosticKind(Enum):
    """Outcome of processing a single include directive."""

    INCLUDED = "included"
    UNRESOLVABLE_EXTERNAL = "unresolvable_external"
    LOCAL_FILE_MISSING = "local_file_missing"
    READ_FAILURE = "read_failure"
    DEPTH_EXCEEDED = "depth_exceeded"


@dataclass(frozen=True)
class Diagnostic:
    """A single expansion event.

    Args:
        kind: What happened
        virtual_path: Path from the directive, None for depth events
        detail: Physical path or error message, when there is one
        depth: Recursion depth the event occurred at
    """

    kind: DiagnosticKind
    virtual_path: Optional[str]
    detail: Optional[str]
    depth: int


DiagnosticSink = Callable[[Diagnostic], None]

# Log level per diagnostic kind
_LEVELS = {
    DiagnosticKind.INCLUDED: "info",
    DiagnosticKind.UNRESOLVABLE_EXTERNAL: "info",
    DiagnosticKind.LOCAL_FILE_MISSING: "info",
    DiagnosticKind.READ_FAILURE: "error",
    DiagnosticKind.DEPTH_EXCEEDED: "warning",
}

_MESSAGES = {
    DiagnosticKind.INCLUDED: "SSI included",
    DiagnosticKind.UNRESOLVABLE_EXTERNAL: "SSI not found (external)",
    DiagnosticKind.LOCAL_FILE_MISSING: "SSI not found (local)",
    DiagnosticKind.READ_FAILURE: "SSI read error",
    DiagnosticKind.DEPTH_EXCEEDED: "SSI include depth limit exceeded",
}


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default sink: write the diagnostic to the structured log."""
    log = getattr(logger, _LEVELS[diagnostic.kind])
    log(
        _MESSAGES[diagnostic.kind],
        path=diagnostic.virtual_path,
        detail=diagnostic.detail,
        depth=diagnostic.depth,
    )


class DiagnosticCollector:
    """Sink that keeps diagnostics in memory.

    Used where the caller wants to inspect what happened during an
    expansion instead of (or in addition to) logging it.
    """

    def __init__(self, forward: Optional[DiagnosticSink] = None) -> None:
        """Initialize the collector.

        Args:
            forward: Optional sink every diagnostic is passed on to
        """
        self.diagnostics: List[Diagnostic] = []
        self._forward = forward

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self._forward is not None:
            self._forward(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]
