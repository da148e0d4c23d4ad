# attendease/wallet.py
from __future__ import annotations
import logging
from typing import Optional

from .logic_models import AppState
from .settings import CREDITS_PER_BOOKING

log = logging.getLogger(__name__)


class WalletLedger:
    """
    Sole mutator of trainee credit balances.
    Dumb accumulator: callers check 'enough credits' before debiting.
    """

    def __init__(self, state: AppState):
        self.state = state

    def balance(self, trainee_id: str) -> int:
        user = self.state.find_user(trainee_id)
        if not user or not user.is_trainee:
            return 0
        return user.credits or 0

    def adjust(self, trainee_id: str, delta: int) -> Optional[int]:
        """Apply delta to the balance. Staff and unknown ids are no-ops (returns None)."""
        user = self.state.find_user(trainee_id)
        if not user or not user.is_trainee:
            return None
        user.credits = (user.credits or 0) + delta
        log.info(f"[wallet] {trainee_id} {delta:+d} → {user.credits}")
        return user.credits

    def credit(self, trainee_id: str, amount: int) -> Optional[int]:
        return self.adjust(trainee_id, amount)

    def debit(self, trainee_id: str, amount: int = CREDITS_PER_BOOKING) -> Optional[int]:
        return self.adjust(trainee_id, -amount)
