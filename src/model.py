from dataclasses import dataclass, field
from typing import Dict, Optional, Any
import logging

from exceptions import UnavailableError

logger = logging.getLogger(__name__)


def _as_text(value) -> str:
    # host form values may arrive as numbers or null
    return "" if value is None else str(value)


@dataclass(frozen=True)
class VariantDescriptor:
    url: str
    width: int
    height: int

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class DimensionMetadata:
    width: int
    height: int
    updated_at: int

    def to_dict(self) -> Dict[str, Any]:
        # "updated" is the key the field has always been stored with
        return {"width": self.width, "height": self.height, "updated": self.updated_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DimensionMetadata":
        return cls(int(data["width"]), int(data["height"]), int(data.get("updated", 0)))


@dataclass(frozen=True)
class ErrorLogEntry:
    message: str
    time: int

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "time": self.time}


@dataclass
class ImageFieldValue:
    """
    Value of a Cloudflare Image field as stored by the host.

    ``variants`` and ``metadata`` are derived members; ``None`` means absent
    and they are left out of the serialised dict.
    """
    url: str = ""
    alt: str = ""
    variants: Optional[Dict[str, VariantDescriptor]] = None
    metadata: Optional[DimensionMetadata] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ImageFieldValue":
        if not isinstance(data, dict):
            data = {}
        metadata = data.get("metadata")
        return cls(
            url=_as_text(data.get("url")).strip(),
            alt=_as_text(data.get("alt")),
            metadata=DimensionMetadata.from_dict(metadata) if isinstance(metadata, dict) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"url": self.url, "alt": self.alt}
        if self.variants is not None:
            result["variants"] = {name: v.to_dict() for name, v in self.variants.items()}
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        return result


@dataclass(frozen=True)
class UpdateOffer:
    slug: str
    plugin: str
    new_version: str
    tested: str
    package: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "plugin": self.plugin,
            "new_version": self.new_version,
            "tested": self.tested,
            "package": self.package,
        }


@dataclass(frozen=True)
class ReleaseMetadata:
    name: str
    slug: str
    version: str
    requires: str
    requires_php: str
    tested: str
    author: str
    download_url: str
    last_updated: str
    sections: Dict[str, str]
    banners: Optional[Dict[str, str]] = field(default=None)

    REQUIRED_KEYS = ("name", "slug", "version", "requires", "requires_php", "tested",
                     "author", "download_url", "last_updated")
    SECTION_KEYS = ("description", "installation", "changelog")

    @classmethod
    def from_dict(cls, data: Any) -> "ReleaseMetadata":
        """
        Build release metadata from the decoded endpoint payload.

        The payload is external input: every required member must be present
        and a string, otherwise the whole payload is rejected.

        Raises:
            UnavailableError: If the payload does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise UnavailableError("Release metadata is not a JSON object")

        values = {}
        for key in cls.REQUIRED_KEYS:
            value = data.get(key)
            if not isinstance(value, str):
                raise UnavailableError(f"Release metadata member '{key}' missing or invalid")
            values[key] = value

        sections = data.get("sections")
        if not isinstance(sections, dict):
            raise UnavailableError("Release metadata member 'sections' missing or invalid")
        try:
            values["sections"] = {key: str(sections[key]) for key in cls.SECTION_KEYS}
        except KeyError as e:
            raise UnavailableError(f"Release metadata section {e} missing")

        banners = data.get("banners")
        if banners:
            if not isinstance(banners, dict):
                raise UnavailableError("Release metadata member 'banners' invalid")
            values["banners"] = {"low": banners.get("low", ""), "high": banners.get("high", "")}

        return cls(**values)
