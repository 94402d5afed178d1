import os

from pydantic import BaseModel


class Settings(BaseModel):
    data_dir: str = ".shopsmart"
    log_dir: str = "logs"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            data_dir=os.environ.get("SHOPSMART_DATA_DIR", defaults.data_dir),
            log_dir=os.environ.get("SHOPSMART_LOG_DIR", defaults.log_dir),
            log_level=os.environ.get("SHOPSMART_LOG_LEVEL", defaults.log_level).upper(),
        )
