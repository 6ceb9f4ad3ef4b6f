"""Process settings from environment variables and ``.env``.

Read once by ``quillty.bootstrap.init_engine``; engine functions never
consult the environment.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    quillty_env: str = "development"
    quillty_log_level: str = "info"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}
