# config.py
"""Application configuration for the Q&A retrieval core"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from utils.common import get_log_file_path, get_project_root

class Settings(BaseSettings):
    """Application configuration"""

    # Logger configuration
    LOGGER_NAME: str = "qna_retrieval"
    LOG_FILE_PATH: str = get_log_file_path()
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Vector store
    VECTOR_STORE_PATH: str = f"{get_project_root()}/data/vector-store.json"

    # Read-only collaborators (documents / questions)
    DOCUMENT_REPOSITORY_PATH: str = f"{get_project_root()}/data/documents.json"
    QUESTION_REPOSITORY_PATH: str = f"{get_project_root()}/data/questions.json"

    # Ingestion
    DOCUMENTS_DIR: str = f"{get_project_root()}/documents"
    MIN_CHUNK_CHARS: int = 50
    DEFAULT_SECTION: str = "General"
    STRUCTURED_EXTENSIONS: List[str] = ["md", "markdown"]
    PLAIN_EXTENSIONS: List[str] = ["txt"]

    # Embedding provider (fallback is used when no key is set)
    OPENAI_API_KEY: Optional[str] = None
    EMBEDDING_API_URL: str = "https://api.openai.com/v1/embeddings"
    EMBEDDING_MODEL_NAME: str = "text-embedding-3-small"
    EMBEDDING_DIMENSION: int = 1536

    # Generation providers, tried in this order
    GOOGLE_GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL_NAME: str = "gemini-1.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"

    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL_NAME: str = "claude-3-5-sonnet-20240620"
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION: str = "2023-06-01"

    DRAFT_MAX_TOKENS: int = 2048
    INSTANT_MAX_TOKENS: int = 1500

    # API settings
    REQUEST_TIMEOUT: int = 60

    # Retrieval / FAQ cache
    DEFAULT_TOP_K: int = 3
    FAQ_MATCH_THRESHOLD: float = 0.4
    FAQ_MIN_TOKEN_LENGTH: int = 2
    SIMILAR_QA_LIMIT: int = 3

    # App metadata
    APP_TITLE: str = "Document Q&A Retrieval Service"
    APP_VERSION: str = "1.0.0"

    @property
    def SUPPORTED_EXTENSIONS(self) -> List[str]:
        return self.STRUCTURED_EXTENSIONS + self.PLAIN_EXTENSIONS

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
