"""Registry configuration models.

Each model carries a ``type`` discriminator so a YAML list of registries
validates into the right variant:

```yaml
registries:
  - type: static
    path: config/registries/static.yaml
  - type: content
  - type: dns
    zone: utopia
```
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator


class StaticRegistryConfig(BaseModel):
    """In-memory registry, filled from inline records and/or a YAML file."""

    type: Literal["static"] = "static"
    path: Path | None = Field(default=None, description="YAML file of wire records")
    records: list[dict[str, Any]] = Field(default_factory=list, description="Inline wire records")
    verify_signatures: bool = Field(default=True, description="Require owner signatures on writes")


class ContentRegistryConfig(BaseModel):
    """Content-addressed registry placeholder."""

    type: Literal["content"] = "content"
    gateway: str = Field(default="https://ipfs.io", min_length=1)


class DnsRegistryConfig(BaseModel):
    """DNS TXT registry."""

    type: Literal["dns"] = "dns"
    label: str = Field(default="_uns", min_length=1)
    zone: str = Field(default="utopia", min_length=1)
    timeout: float = Field(default=5.0, gt=0.0, le=60.0)
    nameservers: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _strip_dots(self) -> DnsRegistryConfig:
        self.label = self.label.strip(".")
        self.zone = self.zone.strip(".")
        if not self.label or not self.zone:
            raise ValueError("label and zone must not be only dots")
        return self


RegistryConfig = Annotated[
    StaticRegistryConfig | ContentRegistryConfig | DnsRegistryConfig,
    Field(discriminator="type"),
]
