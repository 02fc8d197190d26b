from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

STORAGE_BACKENDS = ("firestore", "memory")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the recipe API."""

    gcp_project: Optional[str] = None
    collection_name: str = "recipes"
    storage_backend: str = "firestore"
    cors_allowed_origin: str = "*"
    log_level: str = "INFO"
    max_content_length: int = 1024 * 1024

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""

        env = os.environ if environ is None else environ

        storage_backend = env.get("RECIPE_STORAGE_BACKEND", "firestore").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported RECIPE_STORAGE_BACKEND '{storage_backend}'. "
                f"Expected one of: {', '.join(STORAGE_BACKENDS)}."
            )

        return cls(
            gcp_project=env.get("GCP_PROJECT") or None,
            collection_name=env.get("RECIPES_COLLECTION", "recipes"),
            storage_backend=storage_backend,
            cors_allowed_origin=env.get("CORS_ALLOWED_ORIGIN", "*"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            max_content_length=int(env.get("MAX_CONTENT_LENGTH", 1024 * 1024)),
        )


__all__ = ["Settings", "STORAGE_BACKENDS"]
