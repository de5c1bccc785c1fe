import logging
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-40s "
        "%(levelname)-8s: %(message)s"
    )


class LayoutSettings(BaseModel):
    """
    Geometry used by the coordinate assigner.

    The defaults match the node cards drawn by the permission graph UI
    (180x100 px cards, 80 px gaps between cards, 200 px between ranks).
    """

    model_config = ConfigDict(frozen=True)

    node_width: float = Field(
        180.0, gt=0, description="Width of a node card in pixels."
    )
    node_height: float = Field(
        100.0, gt=0, description="Height of a node card in pixels."
    )
    node_margin: float = Field(
        80.0,
        gt=0,
        description=(
            "Gap between neighbouring nodes of one layer; also the padding "
            "around the bounding box."
        ),
    )
    layer_spacing: float = Field(
        200.0, gt=0, description="Distance between consecutive layers in pixels."
    )
    direction: Literal["TB", "BT", "LR", "RL"] = Field(
        "TB",
        description=(
            "Rank direction: TB/BT grow layers downwards/upwards, "
            "LR/RL grow them to the right/left."
        ),
    )


class ViewSettings(BaseModel):
    default_depth: int = Field(
        2, ge=1, description="Hop limit for focal views when the request has none."
    )
    default_max_nodes: int = Field(
        500, ge=1, description="Node limit when the request has none."
    )


class CacheSettings(BaseModel):
    enabled: bool = Field(
        True, description="Disable to recompute every layout."
    )
    capacity: int = Field(
        32, ge=1, description="Number of layouts kept by the LRU cache."
    )


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical configuration for the permission graph layout service.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="PERMGRAPH_",  # PERMGRAPH_LOGGING__LEVEL, PERMGRAPH_CACHE__CAPACITY, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    app_name: str = "permgraph"
    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    layout: LayoutSettings = LayoutSettings()  # type: ignore[call-arg]
    view: ViewSettings = ViewSettings()  # type: ignore[call-arg]
    cache: CacheSettings = CacheSettings()  # type: ignore[call-arg]


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    return AppSettings(**overrides)


def configure_logging(settings: AppSettings) -> None:
    """Apply the logging section to the root logger."""
    level = "DEBUG" if settings.debug else settings.logging.level
    logging.basicConfig(level=level, format=settings.logging.format)
    logging.getLogger(__name__).debug(
        "Logging configured for %s at level %s", settings.app_name, level
    )
