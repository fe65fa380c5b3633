"""
Execution collaborator interface.

The strategy never talks to an exchange directly. It issues order intent
through an ExecutionEngine and reads back capital and position state.
Order placement is asynchronous; capital and position reads return the
engine's cached view synchronously.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ExecutionEngine(ABC):
    """
    Abstract order-execution and accounting collaborator.

    Implementations own order routing, retries and position bookkeeping.
    Exceptions raised here are treated by the strategy as a failure of the
    affected pair only.
    """

    @abstractmethod
    async def buy(self, symbol: str, amount: float) -> Any:
        """Buy ``amount`` units of ``symbol``"""
        pass

    @abstractmethod
    async def sell(self, symbol: str, amount: float) -> Any:
        """Sell (or open a short of) ``amount`` units of ``symbol``"""
        pass

    @abstractmethod
    async def buy_percent(self, symbol: str, percent: float) -> Any:
        """Buy using ``percent`` of available capital"""
        pass

    @abstractmethod
    async def close_position(self, symbol: str) -> Any:
        """Flatten any position in ``symbol``"""
        pass

    @abstractmethod
    def get_position(self, symbol: str) -> Any:
        """Current position in ``symbol`` or None"""
        pass

    @abstractmethod
    def get_capital(self) -> float:
        """Available capital"""
        pass

    @abstractmethod
    def get_equity(self) -> float:
        """Capital plus mark-to-market value of open positions"""
        pass
