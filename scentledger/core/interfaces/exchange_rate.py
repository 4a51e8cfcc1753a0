"""Abstract interface for the USD -> DOP rate supplier."""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel


class ExchangeRateSnapshot(BaseModel):
    """Current rate and where it came from."""

    usd_to_dop: float
    source: str  # "manual", "live", "cache" or "default"
    fetched_at: datetime | None = None
    is_manual: bool = False


class IExchangeRateProvider(ABC):
    """Interface for the exchange rate supplier."""

    @abstractmethod
    async def get_usd_to_dop(self) -> float:
        """Rate to freeze into a new sale. Never raises."""
        pass

    @abstractmethod
    async def fetch_rate(self) -> float:
        """Force a live fetch. Raises ExchangeRateError on failure."""
        pass

    @abstractmethod
    def snapshot(self) -> ExchangeRateSnapshot:
        """Describe the rate currently in effect."""
        pass

    @abstractmethod
    def set_manual_rate(self, rate: float) -> None:
        """Pin a manual rate; disables live fetching."""
        pass

    @abstractmethod
    def clear_manual_rate(self) -> None:
        """Return to live fetching."""
        pass
