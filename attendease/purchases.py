# attendease/purchases.py
"""
purchases.py
────────────────────────────────────────────
Credit-package purchases.

The payment gateway is simulated: purchase() settles instantly, while
purchase_async() waits PAYMENT_DELAY_SECONDS on a worker thread first
and hands back a Future. A queued purchase can still be cancelled with
Future.cancel(); once the worker picks it up it always completes.
Purchases are not idempotent, so callers must block double submits.
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional

from .config import PAYMENT_DELAY_SECONDS
from .errors import InvalidUserError
from .logic_models import AppState, CreditPackage, PaymentRecord, epoch_ms, new_id
from .wallet import WalletLedger

log = logging.getLogger(__name__)


def purchase(
    state: AppState,
    trainee_id: str,
    package: CreditPackage,
    now: Optional[datetime] = None,
) -> PaymentRecord:
    """Append a SUCCESS payment and credit the trainee's wallet by package.credits."""
    trainee = state.find_user(trainee_id)
    if not trainee or not trainee.is_trainee:
        raise InvalidUserError("Only trainees can purchase credit packages.")

    now = now or datetime.now().astimezone()
    payment = PaymentRecord(
        id=new_id(),
        trainee_id=trainee_id,
        amount=package.price,
        credits=package.credits,
        timestamp=epoch_ms(now),
        status="SUCCESS",
    )
    state.payments.append(payment)
    WalletLedger(state).credit(trainee_id, package.credits)
    log.info(f"[purchases] {trainee_id} bought '{package.name}' ({package.credits} credits, {package.price})")
    return payment


class PurchaseProcessor:
    def __init__(self, delay_seconds: float = PAYMENT_DELAY_SECONDS, max_workers: int = 2):
        self.delay_seconds = delay_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="purchase")

    def _run(self, settle: Callable[[], PaymentRecord]) -> PaymentRecord:
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        return settle()

    def purchase_async(
        self,
        settle: Callable[[], PaymentRecord],
        on_done: Optional[Callable[[Future], None]] = None,
    ) -> Future:
        """
        Schedule `settle` (which applies and commits the purchase) after the
        simulated gateway delay.
        """
        future = self._executor.submit(self._run, settle)
        if on_done:
            future.add_done_callback(on_done)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
