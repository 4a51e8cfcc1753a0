"""Exchange rate supplier."""

from scentledger.infrastructure.exchange_rate.currencyapi import (
    CurrencyAPIRateProvider,
    get_exchange_rate_provider,
    reset_exchange_rate_provider,
)

__all__ = [
    "CurrencyAPIRateProvider",
    "get_exchange_rate_provider",
    "reset_exchange_rate_provider",
]
