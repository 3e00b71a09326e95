"""Sandbox (proot) configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class SandboxConfig(BaseSettings):
    """External sandbox tool and process tagging settings."""

    sandbox_binary: str = Field(default="proot", alias="sandbox_binary")
    sandbox_root_flag: str = Field(default="-r", alias="sandbox_root_flag")
    container_tag_var: str = Field(default="DOCK_CONTAINER", alias="container_tag_var")
    port_map_var: str = Field(default="DOCK_PORT_MAP", alias="port_map_var")
    root_env_var: str = Field(default="DOCK_ROOT", alias="root_env_var")
    stop_timeout_seconds: float = Field(
        default=5.0, ge=0, le=300, alias="stop_timeout_seconds"
    )

    class Config:
        env_prefix = ""
        extra = "ignore"
