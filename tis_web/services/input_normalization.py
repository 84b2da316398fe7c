from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from tis_web.domain.errors import ValidationError
from tis_web.domain.models import (
    DEFAULT_MIME_TYPE,
    AnalysisInput,
    Attachment,
    FileInput,
    NormalizedRequest,
    TextInput,
    UrlInput,
)
from tis_web.services import prompt_builder
from tis_web.services.url_normalization import GuessComUrlNormalizer, UrlNormalizer


def parse_input(payload: Any) -> AnalysisInput:
    """
    Decode the wire shape {"type": ..., "value": ...} into one of the input dataclasses.
    Only shape is checked here; emptiness is checked by InputNormalizer.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must contain an 'input' object.")

    raw_kind = payload.get("type")
    kind = raw_kind.strip().lower() if isinstance(raw_kind, str) else ""
    value = payload.get("value")

    if kind == "url":
        if value is not None and not isinstance(value, str):
            raise ValidationError("URL input value must be a string.")
        return UrlInput(url=value or "")

    if kind == "text":
        if value is not None and not isinstance(value, str):
            raise ValidationError("Text input value must be a string.")
        return TextInput(text=value or "")

    if kind == "file":
        if not isinstance(value, dict):
            raise ValidationError("File input value must be an object with 'data' and 'mimeType'.")
        encoded = value.get("data") or ""
        if not isinstance(encoded, str):
            raise ValidationError("File data must be a base64 string.")
        # tolerate data URLs ("data:application/pdf;base64,....")
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("File data is not valid base64.") from e
        mime_type = value.get("mimeType")
        mime_type = mime_type.strip() if isinstance(mime_type, str) else ""
        return FileInput(data=data, mime_type=mime_type or DEFAULT_MIME_TYPE)

    raise ValidationError("Input type must be one of: url, file, text.")


@dataclass(frozen=True)
class InputNormalizer:
    """Builds the directive for each input kind. Never touches the network."""
    url_normalizer: UrlNormalizer = field(default_factory=GuessComUrlNormalizer)

    def normalize(self, analysis_input: AnalysisInput) -> NormalizedRequest:
        if isinstance(analysis_input, UrlInput):
            try:
                url = self.url_normalizer.normalize(analysis_input.url)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            if not url:
                raise ValidationError("Please enter a valid URL")
            return NormalizedRequest(
                directive=prompt_builder.build_url_directive(analysis_input.url.strip(), url),
                allow_retrieval=True,
            )

        if isinstance(analysis_input, FileInput):
            if not analysis_input.data:
                raise ValidationError("Please upload a PDF document")
            return NormalizedRequest(
                directive=prompt_builder.build_file_directive(),
                attachment=Attachment(
                    data=analysis_input.data,
                    mime_type=(analysis_input.mime_type or "").strip() or DEFAULT_MIME_TYPE,
                ),
            )

        if isinstance(analysis_input, TextInput):
            if not (analysis_input.text or "").strip():
                raise ValidationError("Please paste the ToS text content")
            return NormalizedRequest(directive=prompt_builder.build_text_directive(analysis_input.text))

        raise ValidationError(f"Unsupported input: {type(analysis_input).__name__}")
