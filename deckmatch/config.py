from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DeckMatch"
    debug: bool = False

    # Catalog sources above this size (UTF-8 bytes) are rejected before parsing
    max_catalog_bytes: int = 32 * 1024 * 1024

    # Matching preferences
    variant_priority: list[str] = Field(default_factory=lambda: ["Regular", "Foil", "Holo"])
    set_priority: list[str] = Field(default_factory=list)
    fuzzy_enabled: bool = True

    # Inclusion policy applied after parsing (MAIN is always included)
    include_sideboard: bool = False
    include_commanders: bool = False

    # Price in cents used when a catalog row has no usable price
    default_type_prices: dict[str, int] = Field(
        default_factory=lambda: {"Regular": 220, "Holo": 300, "Foil": 350}
    )


settings = Settings()


# =============================================================================
# FUZZY MATCHING LIMITS
# =============================================================================

# Catalog keys whose length differs from the query by more than this are
# never scored
FUZZY_LENGTH_WINDOW = 3

# Queries up to this length accept SHORT_QUERY_MAX_DISTANCE, longer ones
# accept LONG_QUERY_MAX_DISTANCE
SHORT_QUERY_MAX_LENGTH = 15
SHORT_QUERY_MAX_DISTANCE = 2
LONG_QUERY_MAX_DISTANCE = 3
