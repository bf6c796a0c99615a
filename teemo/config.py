from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TEEMO_", env_file=".env", extra="ignore")

    # Where the store document lives: {data_dir}/{store_key}.json
    data_dir: str = ".teemo"
    store_key: str = "teemo_db"

    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    return Settings()
