from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AwsConfig(BaseSettings):
    """Shared AWS credentials and region"""

    access_key_id: Optional[str] = None
    secret_access_key: Optional[SecretStr] = None
    region: str = "us-east-1"
    connect_timeout: float = Field(default=5.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: Optional[str] = Field(
        default=None,
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="amazon.nova-micro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=200,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    report_max_tokens: int = Field(
        default=1500,
        validation_alias="BEDROCK_REPORT_MAX_TOKENS",
        ge=1,
        le=8192,
    )
    temperature: float = Field(
        default=0.0,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class KnowledgeBaseConfig(BaseSettings):
    """Bedrock Knowledge Base used for retrieval-augmented answers."""

    knowledge_base_id: Optional[str] = None
    region: Optional[str] = None
    top_k: int = Field(default=5, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_prefix="KB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe streaming configuration."""

    region: Optional[str] = None
    language_code: str = "en-US"
    media_sample_rate_hz: int = Field(default=16000, ge=8000, le=48000)
    timeout_seconds: float = Field(default=120.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class ReportConfig(BaseSettings):
    """Where the conversation analysis report is written."""

    backend: Literal["local", "s3"] = "local"
    path: str = "data/data.json"
    bucket_name: Optional[str] = None
    object_key: str = "reports/data.json"

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Conversation Insight Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/insight_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Upper bound for /transcribeAndClassify uploads
    max_audio_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Knowledge base
    knowledge_base: KnowledgeBaseConfig = Field(default_factory=KnowledgeBaseConfig)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Report artifact
    report: ReportConfig = Field(default_factory=ReportConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
