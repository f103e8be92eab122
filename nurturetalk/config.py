"""Configuration settings for the NurtureTalk backend."""

from pathlib import Path
from typing import List
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    app_name: str = "NurtureTalk API"
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # OpenAI
    openai_api_key: str = ""
    llm_model: str = "gpt-4o-mini"

    # Embeddings: "openai" or "hashing" (local, no credentials)
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dims: int = 1536

    # Vector store: pinecone, chroma, astra, mem0, memory or none
    vector_store: str = "pinecone"
    top_k: int = 5
    history_window: int = 10

    # Pinecone
    pinecone_api_key: str = ""
    pinecone_index_name: str = "nurturetalk"
    pinecone_host: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    pinecone_integrated_embedding: bool = False
    pinecone_text_field: str = "text"

    # Chroma
    chroma_path: str = "data/chroma"
    chroma_host: str = ""
    chroma_port: int = 8000
    chroma_collection: str = "nurturetalk"

    # AstraDB
    astra_db_application_token: str = ""
    astra_db_api_endpoint: str = ""
    astra_db_collection: str = "nurturetalk"
    astra_vectorize: bool = False

    # Behaviour
    await_memory_writes: bool = False
    cascade_delete_memory: bool = True
    chat_store_path: Path = Path("data/chats.json")
    report_dir: Path = Path("data/reports")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def memory_enabled(self) -> bool:
        return self.vector_store.lower() != "none"

    def missing_credentials(self) -> List[str]:
        """
        List the environment variables the selected providers need but lack.

        Returns:
            Upper-cased variable names, empty when fully configured.
        """
        missing = []
        store = self.vector_store.lower()

        # The LLM always runs on OpenAI
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")

        if store == "pinecone":
            if not self.pinecone_api_key:
                missing.append("PINECONE_API_KEY")
            if not self.pinecone_index_name:
                missing.append("PINECONE_INDEX_NAME")
        elif store == "mem0":
            if not self.pinecone_api_key:
                missing.append("PINECONE_API_KEY")
        elif store == "astra":
            if not self.astra_db_application_token:
                missing.append("ASTRA_DB_APPLICATION_TOKEN")
            if not self.astra_db_api_endpoint:
                missing.append("ASTRA_DB_API_ENDPOINT")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
