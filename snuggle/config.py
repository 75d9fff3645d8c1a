from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b"
    OLLAMA_TEMPERATURE: float = 0.7
    OLLAMA_NUM_PREDICT: int = 4000

    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    SITE_URL: str = "http://localhost:3000"
    RATE_LIMIT: str = "10/minute"
    THEME_HISTORY_LIMIT: int = 20
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")
