"""
cinescript.llm.images - Storyboard frame generation and editing.

Image references are data URIs (``data:image/png;base64,...``) or URLs,
whichever the backend returns.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from cinescript.exceptions import ImageSynthesisError, LLMError

DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def decode_image_ref(image: str) -> bytes:
    """Decode a data URI or bare base64 string into image bytes.

    Raises:
        ImageSynthesisError: If the reference is not base64 image data
    """
    cleaned = DATA_URI_PREFIX.sub("", image.strip())
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageSynthesisError("Existing image is not base64 image data") from e


def generate_image(client: Any, prompt: str, console=None) -> str:
    """Generate a storyboard frame from a prompt.

    Raises:
        ImageSynthesisError: If the prompt is empty or the backend fails
    """
    if not prompt.strip():
        raise ImageSynthesisError("Image prompt is empty")
    try:
        return client.generate_image(prompt, console=console)
    except LLMError as e:
        raise ImageSynthesisError(f"Failed to generate image: {e}") from e


def edit_image(client: Any, existing_image: str, prompt: str, console=None) -> str:
    """Apply a generative edit to an existing frame.

    Raises:
        ImageSynthesisError: If the image can't be decoded or the backend fails
    """
    if not prompt.strip():
        raise ImageSynthesisError("Image prompt is empty")
    image = decode_image_ref(existing_image)
    try:
        return client.edit_image(image, prompt, console=console)
    except LLMError as e:
        raise ImageSynthesisError(f"Failed to edit image: {e}") from e
