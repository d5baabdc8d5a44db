"""
ecs_log_transform.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Env-driven defaults for the transform options and logging setup.
- Offer a cached settings instance for `configure_logging`.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from ecs_log_transform.transform import EcsOptions


class EcsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ECS_LOG_", case_sensitive=False)

    # Field conversion (see `EcsOptions`)
    convert_err: bool = True
    convert_req_res: bool = False

    # Set to false to skip Elastic APM agent detection even when it is installed.
    apm_integration: bool = True

    log_level: str = "INFO"

    def options(self) -> EcsOptions:
        return EcsOptions(convert_err=self.convert_err, convert_req_res=self.convert_req_res)


@lru_cache(maxsize=1)
def get_settings() -> EcsSettings:
    # Cache avoids re-parsing env vars on repeated logging setup.
    return EcsSettings()


# --- Module Notes -----------------------------------------------------------
# Settings only feed adapters; `ecs_transform` itself takes explicit options so it
# stays a pure function of its arguments.
