from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class SegmentationSettings(BaseSettings):
    """Environment-backed knobs for semantic segmentation (token based)."""

    target_tokens: int = Field(1200, alias="SEGMENT_TARGET_TOKENS")
    max_tokens: int = Field(1800, alias="SEGMENT_MAX_TOKENS")
    min_tokens: int = Field(400, alias="SEGMENT_MIN_TOKENS")
    similarity_drop_threshold: float = Field(0.25, alias="SEGMENT_SIMILARITY_DROP_THRESHOLD")
    std_multiplier: float = Field(1.0, alias="SEGMENT_STD_MULTIPLIER")
    smoothing_window_radius: int = Field(2, alias="SEGMENT_SMOOTHING_WINDOW_RADIUS")
    # characters at either edge of an oversized piece that may not host a split
    split_edge_margin: int = Field(200, alias="SEGMENT_SPLIT_EDGE_MARGIN")
    embedding_batch_size: int = Field(64, alias="SEGMENT_EMBEDDING_BATCH_SIZE")
    sentence_splitter: Literal["auto", "syntok", "regex"] = Field(
        "auto", alias="SEGMENT_SENTENCE_SPLITTER"
    )

    model_config = _ENV_CONFIG

    @model_validator(mode="after")
    def _check_bounds(self) -> SegmentationSettings:
        if not 0 < self.min_tokens <= self.target_tokens <= self.max_tokens:
            raise ValueError(
                "token bounds must satisfy 0 < min_tokens <= target_tokens <= max_tokens "
                f"(got min={self.min_tokens}, target={self.target_tokens}, max={self.max_tokens})"
            )
        if self.smoothing_window_radius < 0:
            raise ValueError("smoothing_window_radius must be >= 0")
        if self.split_edge_margin < 0:
            raise ValueError("split_edge_margin must be >= 0")
        if self.embedding_batch_size <= 0:
            raise ValueError("embedding_batch_size must be > 0")
        return self


class FusionSettings(BaseSettings):
    top_k_for_confidence: int = Field(5, alias="FUSION_TOP_K_FOR_CONFIDENCE")
    # default for CLI/use cases only; the fusion functions always take an explicit limit
    result_limit: int = Field(10, alias="FUSION_RESULT_LIMIT")

    model_config = _ENV_CONFIG

    @field_validator("top_k_for_confidence", "result_limit")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v


class TokenizerSettings(BaseSettings):
    backend: Literal["tiktoken", "whitespace"] = Field("tiktoken", alias="TOKENIZER_BACKEND")
    encoding: str = Field("cl100k_base", alias="TOKENIZER_ENCODING")

    model_config = _ENV_CONFIG


class RetrySettings(BaseSettings):
    max_retries: int = Field(3, alias="RETRY_MAX_RETRIES")
    initial_delay: float = Field(1.0, alias="RETRY_INITIAL_DELAY")  # seconds
    max_delay: float = Field(30.0, alias="RETRY_MAX_DELAY")
    backoff_factor: float = Field(2.0, alias="RETRY_BACKOFF_FACTOR")

    model_config = _ENV_CONFIG


Provider = Literal["huggingface", "openai", "dummy"]


class EmbeddingConfig(BaseModel):
    provider: Provider = Field(default="huggingface")
    model_name: str = Field(default="sentence-transformers/all-MiniLM-L6-v2")
    # "auto" | "cpu" | "cuda" | "cuda:0" | "mps"
    device: str = Field(default="auto")
    normalize_embeddings: bool = True
    # OpenAI specific
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    batch_size: int = 32

    @property
    def signature(self) -> str:
        # Stable signature to tag vector records, includes device and normalization
        return (
            f"{self.provider}:{self.model_name}:{self.device}"
            f":{'norm' if self.normalize_embeddings else 'raw'}"
        )


class AppSettings(BaseModel):
    embeddings: EmbeddingConfig = EmbeddingConfig()
    image_embeddings: EmbeddingConfig | None = None
    segmentation: SegmentationSettings = Field(default_factory=SegmentationSettings)
    fusion: FusionSettings = Field(default_factory=FusionSettings)
    tokenizer: TokenizerSettings = Field(default_factory=TokenizerSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
