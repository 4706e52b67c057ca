import os
from dataclasses import dataclass

from dotenv import load_dotenv


# Load environment variables from a .env file if present.
load_dotenv()


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    llm_base_url: str
    llm_api_key: str
    llm_model_name: str
    llm_max_output_tokens: int
    llm_temperature: float
    llm_timeout_seconds: float

    embedder_model_path: str
    embedder_device: str

    graph_backend: str  # "memory" or "neo4j"

    neo4j_uri: str
    neo4j_username: str
    neo4j_password: str

    graph_html_height: int  # pixel height of the rendered graph view

    @property
    def uses_neo4j(self) -> bool:
        return self.graph_backend.lower() == "neo4j"


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Return singleton Settings instance populated from environment variables.

    Environment variables (with reasonable defaults for local dev):
      - LLM_BASE_URL
      - LLM_API_KEY
      - LLM_MODEL_NAME
      - LLM_MAX_OUTPUT_TOKENS
      - LLM_TEMPERATURE
      - LLM_TIMEOUT_SECONDS
      - EMBEDDER_MODEL_PATH
      - EMBEDDER_DEVICE
      - GRAPH_BACKEND
      - NEO4J_URI
      - NEO4J_USERNAME
      - NEO4J_PASSWORD
      - GRAPH_HTML_HEIGHT
    """
    global _settings
    if _settings is not None:
        return _settings

    llm_base_url = os.getenv("LLM_BASE_URL", "http://langchain4j.dev/demo/openai/v1")
    llm_api_key = os.getenv("LLM_API_KEY", "demo")
    llm_model_name = os.getenv("LLM_MODEL_NAME", "gpt-4o-mini")
    llm_max_output_tokens = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "512"))
    llm_temperature = float(os.getenv("LLM_TEMPERATURE", "0.2"))
    llm_timeout_seconds = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))

    # Either a local directory or a Hugging Face model id.
    embedder_model_path = os.getenv(
        "EMBEDDER_MODEL_PATH", "sentence-transformers/all-MiniLM-L6-v2"
    )
    embedder_device = os.getenv("EMBEDDER_DEVICE", "cpu")

    graph_backend = os.getenv("GRAPH_BACKEND", "memory")

    neo4j_uri = os.getenv("NEO4J_URI", "bolt://127.0.0.1:7687")
    neo4j_username = os.getenv("NEO4J_USERNAME", "neo4j")
    neo4j_password = os.getenv("NEO4J_PASSWORD", "password")

    graph_html_height = int(os.getenv("GRAPH_HTML_HEIGHT", "600"))

    _settings = Settings(
        llm_base_url=llm_base_url,
        llm_api_key=llm_api_key,
        llm_model_name=llm_model_name,
        llm_max_output_tokens=llm_max_output_tokens,
        llm_temperature=llm_temperature,
        llm_timeout_seconds=llm_timeout_seconds,
        embedder_model_path=embedder_model_path,
        embedder_device=embedder_device,
        graph_backend=graph_backend,
        neo4j_uri=neo4j_uri,
        neo4j_username=neo4j_username,
        neo4j_password=neo4j_password,
        graph_html_height=graph_html_height,
    )
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() re-reads the env."""
    global _settings
    _settings = None


__all__ = ["Settings", "get_settings", "reset_settings"]
