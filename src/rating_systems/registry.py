"""
Registry of available rating systems.

Rating systems are registered under a short identifier when this module is
imported. Lookups by identifier return a fresh instance; identifiers that
were never registered raise RatingSystemNotFoundError.

Configuration:
    PICS_ACTIVE_SYSTEMS=rsaci,rta   Rating systems active on every page
"""

import logging
import os
from collections.abc import Callable, Iterable

from rating_systems.base import RatingSystem, RatingSystemNotFoundError
from rating_systems.rsaci import RsaciRatingSystem
from rating_systems.rta import RtaRatingSystem

logger = logging.getLogger(__name__)

ACTIVE_SYSTEMS_ENV = "PICS_ACTIVE_SYSTEMS"
DEFAULT_ACTIVE_SYSTEMS = "rsaci,rta"

RatingSystemFactory = Callable[[], RatingSystem]

_registry: dict[str, RatingSystemFactory] = {}


def register_rating_system(system_id: str, factory: RatingSystemFactory) -> None:
    """
    Register a rating system factory.

    Raises:
        ValueError: If the identifier is already registered
    """
    if system_id in _registry:
        raise ValueError(f"Rating system already registered: {system_id}")
    _registry[system_id] = factory


def unregister_rating_system(system_id: str) -> None:
    _registry.pop(system_id, None)


def available_rating_systems() -> list[str]:
    return sorted(_registry)


def get_rating_system(system_id: str) -> RatingSystem:
    """
    Return a new instance of a registered rating system.

    Raises:
        RatingSystemNotFoundError: If no system has that identifier
    """
    factory = _registry.get(system_id)
    if factory is None:
        raise RatingSystemNotFoundError(f"Rating system not found: {system_id}")
    return factory()


def configured_system_ids() -> list[str]:
    """Identifiers listed in PICS_ACTIVE_SYSTEMS, in order."""
    raw = os.getenv(ACTIVE_SYSTEMS_ENV, DEFAULT_ACTIVE_SYSTEMS)
    return [part.strip() for part in raw.split(",") if part.strip()]


def get_active_rating_systems(system_ids: Iterable[str] | None = None) -> dict[str, RatingSystem]:
    """
    Instantiate the active rating systems.

    Args:
        system_ids: Identifiers to activate (defaults to PICS_ACTIVE_SYSTEMS)

    Returns:
        Mapping of identifier to rating system, in activation order

    Raises:
        RatingSystemNotFoundError: If any identifier is unknown
    """
    if system_ids is None:
        system_ids = configured_system_ids()
    return {system_id: get_rating_system(system_id) for system_id in system_ids}


register_rating_system("rsaci", RsaciRatingSystem)
register_rating_system("rta", RtaRatingSystem)
