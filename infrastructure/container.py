"""
Dependency Injection Container
================================

Composition root for the domain services. Repositories are built once and
injected into the services that need them, so no service reaches for a
module-level singleton of another.

Usage:
    from infrastructure.container import container

    order_service = container.order_service()
    ranking_service = container.ranking_service()
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for repositories and domain services.

    Implements lazy initialization and caching of service instances.
    Singleton: every ``ServiceContainer()`` returns the same object.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._clear()
            self._initialized = True
            logger.info("Service container initialized")

    def _clear(self):
        # Repositories
        self._ranking_repository = None
        self._engagement_repository = None

        # Domain Services
        self._ranking_service = None
        self._engagement_service = None
        self._inventory_service = None
        self._product_service = None
        self._order_service = None

    def ranking_repository(self):
        """Get RankingRepository instance."""
        if self._ranking_repository is None:
            from rankings.domain.repositories import RankingRepository

            self._ranking_repository = RankingRepository()
            logger.debug("Created RankingRepository")
        return self._ranking_repository

    def engagement_repository(self):
        """Get EngagementRepository instance."""
        if self._engagement_repository is None:
            from engagement.domain.repositories import EngagementRepository

            self._engagement_repository = EngagementRepository()
            logger.debug("Created EngagementRepository")
        return self._engagement_repository

    def ranking_service(self):
        """Get RankingService instance."""
        if self._ranking_service is None:
            from rankings.domain.services import RankingService

            self._ranking_service = RankingService(ranking_repository=self.ranking_repository())
            logger.debug("Created RankingService")
        return self._ranking_service

    def engagement_service(self):
        """Get EngagementService instance."""
        if self._engagement_service is None:
            from engagement.domain.services import EngagementService

            # EngagementService rewards content owners through RankingService
            self._engagement_service = EngagementService(
                engagement_repository=self.engagement_repository(),
                ranking_service=self.ranking_service(),
            )
            logger.debug("Created EngagementService")
        return self._engagement_service

    def inventory_service(self):
        """Get InventoryService instance."""
        if self._inventory_service is None:
            from marketplace.catalog.domain.services import InventoryService

            self._inventory_service = InventoryService()
            logger.debug("Created InventoryService")
        return self._inventory_service

    def product_service(self):
        """Get ProductService instance."""
        if self._product_service is None:
            from marketplace.catalog.domain.services import ProductService

            self._product_service = ProductService()
            logger.debug("Created ProductService")
        return self._product_service

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.ordering.domain.services import OrderService

            self._order_service = OrderService(inventory_service=self.inventory_service())
            logger.debug("Created OrderService")
        return self._order_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when swapping a service for a mock.
        """
        self._clear()
        logger.info("Service container reset")


# Global singleton instance
container = ServiceContainer()
