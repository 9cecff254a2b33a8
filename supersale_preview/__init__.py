"""Local SSI preview server for SuperSALE campaign pages."""

from .expander import IncludeExpander
from .resolver import PrefixRule, VirtualPathResolver

__all__ = ["IncludeExpander", "PrefixRule", "VirtualPathResolver"]
