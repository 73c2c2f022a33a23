"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager
from logger import get_logger

logger = get_logger()


class Services:
    """Container for all application services.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config
                    is not used to locate the database.
        advisory_provider: Optional provider override for testing. When
                    omitted the provider is built from config.
    """

    _UNSET = object()

    def __init__(self, config: Config, db_manager=None, advisory_provider=_UNSET):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.transactions import TransactionService
        from services.store import KeyValueService
        from services.spending import SpendingService
        from llm import AdvisoryGateway, get_advisory_provider

        self.transactions = TransactionService(self.db_manager)
        self.store = KeyValueService(self.db_manager)
        self.spending = SpendingService(self.transactions, self.store, config)

        if advisory_provider is Services._UNSET:
            try:
                advisory_provider = get_advisory_provider(config)
            except ValueError as e:
                # A misconfigured advisor must not take the app down
                logger.error(f"Failed to initialize advisory provider: {e}")
                advisory_provider = None
        self.advisor = AdvisoryGateway(advisory_provider)
