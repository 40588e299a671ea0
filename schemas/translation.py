# User value: This file defines the exact batch document the translation service receives.
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

STORAGE_TYPE_FILE = "File"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class BatchSource(_Document):
    source_url: str = Field(..., alias="sourceUrl")
    # Omitted from the payload when unset: the service auto-detects the language.
    language: Optional[str] = None


class BatchTarget(_Document):
    target_url: str = Field(..., alias="targetUrl")
    language: str = Field(..., min_length=1)


class BatchInput(_Document):
    storage_type: Literal["File"] = Field(default=STORAGE_TYPE_FILE, alias="storageType")
    source: BatchSource
    targets: List[BatchTarget] = Field(..., min_length=1)


class TranslationRequest(_Document):
    inputs: List[BatchInput] = Field(..., min_length=1)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True, exclude_none=True)


def build_translation_request(
    source_url: str,
    target_url: str,
    source_language: str | None,
    target_language: str,
) -> TranslationRequest:
    return TranslationRequest(
        inputs=[
            BatchInput(
                source=BatchSource(source_url=source_url, language=source_language or None),
                targets=[BatchTarget(target_url=target_url, language=target_language)],
            )
        ]
    )


def render_translation_request(
    source_url: str,
    target_url: str,
    source_language: str | None,
    target_language: str,
) -> str:
    return build_translation_request(source_url, target_url, source_language, target_language).to_json()
