"""WebFinger JSON Resource Descriptor models.

A WebFinger entry is served as a JRD document. Links and properties are omitted from the
document when they are empty.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """A link relation of a WebFinger resource.

    `rel` is a URN or an unresolved alias name, `href` is the URI the relation points to.
    """

    model_config = ConfigDict(frozen=True)

    rel: str
    href: str


class WebFinger(BaseModel):
    """A WebFinger resource as served to clients."""

    model_config = ConfigDict(frozen=True)

    subject: str
    links: List[Link] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)

    def to_jrd(self) -> bytes:
        """Serialize to a JRD document, dropping empty links and properties."""
        empty = {name for name in ("links", "properties") if not getattr(self, name)}
        return self.model_dump_json(exclude=empty).encode("utf-8")


Resources = Dict[str, Dict[str, str]]
"""Raw resource definitions: resource key -> attribute name -> value."""

URNAliases = Dict[str, str]
"""Alias table: short attribute name -> canonical URN."""

WebFingers = Dict[str, WebFinger]
"""The served index: canonical subject -> WebFinger."""
