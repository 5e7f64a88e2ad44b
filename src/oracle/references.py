"""Reference classification and reference helpers.

A reference is any auxiliary input to a question. Classification is derived
from what the object can do and what its bytes look like, never from a
caller-declared tag or a filename:

* anything exposing a usable ``write`` is an Artifact (a destination for
  generated binary output) and is never read;
* anything else is read to bytes, and bytes starting with the PNG signature
  are an Image, everything else is Text.
"""

from __future__ import annotations

import enum
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from oracle.errors import UnprocessableReferenceError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class ReferenceKind(enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    ARTIFACT = "artifact"


@dataclass(frozen=True, slots=True)
class Reference:
    kind: ReferenceKind
    payload: bytes = b""
    sink: Any = None
    source: str = ""

    @property
    def is_image(self) -> bool:
        return self.kind is ReferenceKind.IMAGE

    @property
    def is_artifact(self) -> bool:
        return self.kind is ReferenceKind.ARTIFACT

    def text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


def is_png(data: bytes) -> bool:
    return len(data) >= len(PNG_SIGNATURE) and data[: len(PNG_SIGNATURE)] == PNG_SIGNATURE


def is_writable(obj: object) -> bool:
    """Capability check for write-back sinks; performs no write."""
    write = getattr(obj, "write", None)
    if not callable(write):
        return False
    writable = getattr(obj, "writable", None)
    if callable(writable):
        try:
            return bool(writable())
        except (OSError, ValueError):
            return False
    return True


def _is_image_object(obj: object) -> bool:
    return callable(getattr(obj, "save", None)) and hasattr(obj, "size")


def _classify_bytes(data: bytes, kind: ReferenceKind = ReferenceKind.TEXT) -> Reference:
    if is_png(data):
        return Reference(ReferenceKind.IMAGE, payload=data)
    return Reference(kind, payload=data)


def _reclassify(reference: Reference) -> Reference:
    if reference.sink is not None:
        return classify(reference.sink)
    kind = ReferenceKind.FILE if reference.source else ReferenceKind.TEXT
    ref = _classify_bytes(reference.payload, kind)
    return Reference(ref.kind, payload=ref.payload, source=reference.source)


def classify(reference: object) -> Reference:
    """Classify one caller-supplied reference.

    Accepts ``str``, ``bytes``-like values, ``os.PathLike`` paths, image
    objects exposing ``save(fp, format=...)``, readable streams, and writable
    sinks. A ``Reference`` is re-derived from its sink or payload, so a
    declared kind never sticks. Anything else, including a stream that fails
    to read, raises ``UnprocessableReferenceError``.
    """
    if isinstance(reference, Reference):
        return _reclassify(reference)
    if isinstance(reference, str):
        return Reference(ReferenceKind.TEXT, payload=reference.encode("utf-8"))
    if isinstance(reference, (bytes, bytearray, memoryview)):
        return _classify_bytes(bytes(reference))
    if isinstance(reference, os.PathLike):
        path = Path(reference)
        ref = _classify_bytes(File(path), ReferenceKind.FILE)
        return Reference(ref.kind, payload=ref.payload, source=str(path))
    if is_writable(reference):
        return Reference(ReferenceKind.ARTIFACT, sink=reference)
    if _is_image_object(reference):
        return Reference(ReferenceKind.IMAGE, payload=Image(reference))
    read = getattr(reference, "read", None)
    if callable(read):
        try:
            data = read()
        except (OSError, ValueError) as exc:
            raise UnprocessableReferenceError(reference, reason=str(exc)) from exc
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not isinstance(data, (bytes, bytearray)):
            raise UnprocessableReferenceError(reference)
        source = str(getattr(reference, "name", "") or "")
        kind = ReferenceKind.FILE if source else ReferenceKind.TEXT
        ref = _classify_bytes(bytes(data), kind)
        return Reference(ref.kind, payload=ref.payload, source=source)
    raise UnprocessableReferenceError(reference)


def classify_all(references: tuple[object, ...] | list[object]) -> tuple[Reference, ...]:
    return tuple(classify(item) for item in references)


def File(path: str | os.PathLike[str]) -> bytes:  # noqa: N802
    """Snapshot a file's bytes; unreadable paths yield empty bytes."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        logger.debug("reference file unreadable: %s (%s)", path, exc)
        return b""


def Folder(root: str | os.PathLike[str], *include_filters: str) -> bytes:  # noqa: N802
    """Concatenate every file under ``root``, each followed by a newline.

    Filters are substring matches on the file name; no filters means every
    file is included. Traversal is recursive and sorted for stable output.
    """
    contents = bytearray()
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if include_filters and not any(f in name for f in include_filters):
                continue
            contents.extend(File(Path(dirpath) / name))
            contents.extend(b"\n")
    return bytes(contents)


def Image(image: Any) -> bytes:  # noqa: N802
    """Encode an image object (anything with ``save(fp, format=...)``) as PNG."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
