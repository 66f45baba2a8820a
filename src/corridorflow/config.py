"""Application configuration using pydantic-settings.

Settings only build the explicit context objects (venue rules, provider
reference data) that are passed into the validator and cascade. Nothing in
corridorflow.flows reads settings on its own.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from corridorflow.flows.pipeline_validator import VenueRules
from corridorflow.flows.provider_defaults import ProviderDefaultsTable, default_provider_table
from corridorflow.flows.steps import PricingProvider, Venue


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Venue rules
    # ======================
    offramp_venue: Venue = Field(
        default=Venue.TRANSFERO,
        description="Venue that converts crypto into the corridor fiat currency",
    )
    transfer_source_venues: str = Field(
        default="BINANCE",
        description="Comma-separated venues allowed as TRANSFER_VENUE sources",
    )

    # ======================
    # Provider reference data
    # ======================
    default_pricing_provider: PricingProvider = Field(
        default=PricingProvider.BINANCE,
        description="Pricing provider for freshly seeded drafts",
    )
    provider_defaults_path: Optional[str] = Field(
        default=None,
        description="JSON file replacing the built-in provider defaults table",
    )

    @property
    def transfer_sources(self) -> frozenset[Venue]:
        """Parse allowed transfer source venues."""
        return frozenset(
            Venue(name.strip().upper())
            for name in self.transfer_source_venues.split(",")
            if name.strip()
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def venue_rules(self) -> VenueRules:
        return VenueRules(offramp_venue=self.offramp_venue, transfer_sources=self.transfer_sources)

    def load_provider_table(self) -> ProviderDefaultsTable:
        """Provider defaults from file if configured, else the built-in table."""
        if self.provider_defaults_path:
            table = ProviderDefaultsTable.from_file(self.provider_defaults_path)
        else:
            table = default_provider_table()
        return table.model_copy(update={"default_pricing_provider": self.default_pricing_provider})

    def get_safe_dict(self) -> dict:
        """Return settings dict for diagnostics."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "venues": {
                "offramp": self.offramp_venue.value,
                "transfer_sources": sorted(v.value for v in self.transfer_sources),
            },
            "providers": {
                "default_pricing": self.default_pricing_provider.value,
                "defaults_file": self.provider_defaults_path or "(built-in)",
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
