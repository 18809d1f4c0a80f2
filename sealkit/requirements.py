from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Requirement:
    """A dependency specifier: ``name[extras] <version or @ url> ; marker``."""

    name: str
    extras: Optional[List[str]] = None
    version: Optional[List[str]] = None  # individual specifiers, e.g. [">=1.0.0", "<2.0.0"]
    url: Optional[str] = None
    marker: Optional[str] = None

    def __post_init__(self):
        if self.version and self.url:
            raise ValueError("A requirement takes either version specifiers or a URL, not both")

    def __str__(self) -> str:
        return format_requirement(self)


def format_requirement(req: Requirement) -> str:
    """Render a requirement in canonical text form.

    ``{`` and ``}`` in URLs are kept literal (percent-encoded braces are
    decoded) so that ``${VAR}`` placeholders survive for later expansion.
    """
    out = req.name
    if req.extras:
        out += "[" + ",".join(req.extras) + "]"
    if req.version:
        out += ", ".join(req.version)
    elif req.url:
        out += " @ " + req.url.replace("%7B", "{").replace("%7D", "}")
    if req.marker:
        out += " ; " + req.marker
    return out
