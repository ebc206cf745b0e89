"""Data types produced by the studio client workflows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Any

# Short names offered to users for the public Veo models.
VEO_MODELS: dict[str, str] = {
    "veo2": "veo-2.0-generate-001",
}


def resolve_video_model(model: str) -> str:
    """Map a short alias like ``veo2`` to its model id; other values pass through."""
    return VEO_MODELS.get(model.strip().lower(), model)


def to_data_uri(mime_type: str, base64_data: str) -> str:
    return f"data:{mime_type};base64,{base64_data}"


def edited_filename(original_name: str, mime_type: str, suffix: str = "edited") -> str:
    """Build ``<stem>-<suffix>.<ext>`` for saving a returned image.

    The extension comes from the mime subtype (``image/png`` -> ``png``).
    """
    stem = PurePath(original_name).stem or "image"
    subtype = mime_type.split("/", 1)[-1].split(";", 1)[0].strip()
    return f"{stem}-{suffix}.{subtype or 'png'}"


class PartKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class EditedImagePart:
    """One piece of an image-edit response: model text or a data URI image."""

    kind: PartKind
    content: str

    @classmethod
    def from_part(cls, part: dict[str, Any]) -> EditedImagePart | None:
        """Map a Gemini content part, or return None for parts with neither text nor image."""
        if part.get("text"):
            return cls(kind=PartKind.TEXT, content=part["text"])
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            mime_type = inline.get("mimeType") or "image/png"
            return cls(kind=PartKind.IMAGE, content=to_data_uri(mime_type, inline["data"]))
        return None


@dataclass
class ImageEditResult:
    """Outcome of editing one image in a batch."""

    name: str
    parts: list[EditedImagePart] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class VideoJobHandle:
    """Identity and status of a long-running Veo operation.

    ``done`` and ``result_uri`` only ever move from absent to present; use
    ``advance`` to fold in a fresh status response.
    """

    name: str
    done: bool = False
    result_uri: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_name: str | None = None) -> VideoJobHandle:
        """Create a handle from a relay operation response."""
        name = data.get("name") or default_name
        if not name:
            raise ValueError("video operation response has no name")
        videos = (data.get("response") or {}).get("generatedVideos") or []
        uri = None
        if videos:
            uri = (videos[0].get("video") or {}).get("uri") or None
        return cls(name=name, done=bool(data.get("done")), result_uri=uri)

    def advance(self, update: VideoJobHandle) -> VideoJobHandle:
        if update.name != self.name:
            raise ValueError(f"status for {update.name} cannot update operation {self.name}")
        return VideoJobHandle(
            name=self.name,
            done=self.done or update.done,
            result_uri=update.result_uri or self.result_uri,
        )
