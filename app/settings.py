from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "KudoSpace Board"
    app_version: str = "0.1.0"
    db_path: str = "data/kudos.db"
    preserve_old_db: bool = False
    log_level: str = "INFO"

    openrouter_api_key: str = ""
    openrouter_api_url: str = "https://openrouter.ai/api/v1"
    openrouter_default_model: str = "meta-llama/llama-3.3-70b-instruct:free"
    openrouter_timeout_ms: int = 30000
    site_url: str = "https://kudospace.dev"
    app_title: str = "KudoSpace"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
