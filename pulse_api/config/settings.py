"""Application configuration settings."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional


def _split_env_list(value: str) -> List[str]:
    """Split a comma separated environment value into trimmed items."""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class CorsSettings:
    """CORS configuration."""

    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    allow_credentials: bool = True


@dataclass
class HierarchySettings:
    """Hierarchy roll-up configuration."""

    # Whether only leaf-eligible roles carry their own KPI values
    gate_by_role: bool = True

    # Roles that report raw metrics (individual contributors)
    leaf_roles: List[str] = field(default_factory=lambda: ["BE", "TE"])

    # "mean_of_children" or "leaf_weighted"
    rollup_mode: str = "mean_of_children"


@dataclass
class RoleCheckSettings:
    """Role lookup configuration."""

    # Roles allowed through the flat role check
    allowed_roles: List[str] = field(default_factory=lambda: ["BE", "KAE", "TE", "NE"])


@dataclass
class Settings:
    """Main application settings."""

    # Application info
    app_name: str = "Pulse Reporting API"
    app_version: str = "1.0.0"
    debug: bool = False
    port: int = 8000

    # CORS
    cors: CorsSettings = field(default_factory=CorsSettings)

    # Hierarchy
    hierarchy: HierarchySettings = field(default_factory=HierarchySettings)

    # Role check
    role_check: RoleCheckSettings = field(default_factory=RoleCheckSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", "Pulse Reporting API"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            port=int(os.getenv("PORT", "8000")),
            cors=CorsSettings(
                allowed_origins=_split_env_list(
                    os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
                ),
            ),
            hierarchy=HierarchySettings(
                gate_by_role=os.getenv("HIERARCHY_GATE_BY_ROLE", "true").lower() == "true",
                leaf_roles=[
                    role.upper()
                    for role in _split_env_list(os.getenv("HIERARCHY_LEAF_ROLES", "BE,TE"))
                ],
                rollup_mode=os.getenv("HIERARCHY_ROLLUP_MODE", "mean_of_children"),
            ),
            role_check=RoleCheckSettings(
                allowed_roles=[
                    role.upper()
                    for role in _split_env_list(
                        os.getenv("ROLE_CHECK_ALLOWED_ROLES", "BE,KAE,TE,NE")
                    )
                ],
            ),
        )


# Singleton settings instance
_settings: Optional[Settings] = None


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
