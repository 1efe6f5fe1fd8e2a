"""
Request intake: pull the image to process out of a multipart submission.

The two input modes are normalized into a single `ImageSource`, a tagged
union of `RawBytes` (an uploaded file) and `ReferenceUrl` (a catalog image
URL). An uploaded file always wins over a URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from starlette.datastructures import FormData, UploadFile

from .errors import BadInput

NO_IMAGE_MESSAGE = "No image provided"
URL_DISPLAY_NAME = "Store Product Image"
FALLBACK_DISPLAY_NAME = "Processed Image"


@dataclass(frozen=True)
class RawBytes:
    data: bytes
    filename: str = ""


@dataclass(frozen=True)
class ReferenceUrl:
    url: str


ImageSource = Union[RawBytes, ReferenceUrl]


@dataclass(frozen=True)
class InboundImageRequest:
    session: Any
    source: ImageSource


async def _read_upload(value: object) -> Optional[RawBytes]:
    if not isinstance(value, UploadFile):
        return None
    data = await value.read()
    if not data:
        return None
    return RawBytes(data=data, filename=value.filename or "")


def _reference_url(value: object) -> Optional[ReferenceUrl]:
    if not isinstance(value, str):
        return None
    url = value.strip()
    return ReferenceUrl(url=url) if url else None


async def read_image_source(form: FormData, accept_url: bool = True) -> ImageSource:
    """
    Resolve the form fields `image` / `imageUrl` into exactly one source.

    Raises:
        BadInput: when neither a non-empty file nor (if accepted) a
            non-blank URL is present.
    """
    upload = await _read_upload(form.get("image"))
    if upload is not None:
        return upload
    if accept_url:
        reference = _reference_url(form.get("imageUrl"))
        if reference is not None:
            return reference
    raise BadInput(NO_IMAGE_MESSAGE)


def display_name(source: ImageSource) -> str:
    """Label shown next to the processed image in the catalog UI."""
    if isinstance(source, RawBytes) and source.filename:
        return source.filename
    if isinstance(source, ReferenceUrl):
        return URL_DISPLAY_NAME
    return FALLBACK_DISPLAY_NAME
