"""Token protocol message builders."""

from .snip20 import SNIP20Protocol

__all__ = ["SNIP20Protocol"]
