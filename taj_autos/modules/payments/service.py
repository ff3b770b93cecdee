from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from ...database import transaction
from ...database.repositories import CustomersRepo, Payment, PaymentsRepo
from ...errors import ValidationError
from ...utils.helpers import fmt_money, new_id, now
from ...utils.validators import require_amount

_log = logging.getLogger(__name__)


class PaymentsService:
    """
    Customer payments against outstanding credit.

    Rules:
      • 0 < amount <= customer's current total_debt (no overpayment, no advances).
      • The payment row and the balance decrement commit together.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.customers = CustomersRepo(conn)
        self.payments = PaymentsRepo(conn)

    def record_payment(
        self,
        customer_id: str,
        amount: float,
        *,
        sale_id: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Payment:
        try:
            with transaction(self.conn):
                customer = self.customers.require(customer_id)
                value = require_amount(amount, "Amount")
                if value > customer.total_debt:
                    raise ValidationError(
                        "Amount cannot be greater than outstanding balance "
                        f"({fmt_money(customer.total_debt)})."
                    )

                ts = date or now()
                payment = Payment(
                    payment_id=new_id(),
                    customer_id=customer.customer_id,
                    customer_name=customer.name,
                    amount=value,
                    date=ts,
                    sale_id=sale_id,
                    created_at=now(),
                )
                self.payments.insert(payment)
                self.customers.reduce_debt(customer.customer_id, value)
        except ValidationError as e:
            _log.warning("payment rejected: %s", e)
            raise

        _log.info("payment %s of %.2f recorded for customer %s", payment.payment_id, value, customer_id)
        return payment

    def payments_for_customer(self, customer_id: str) -> list[Payment]:
        return self.payments.list_by_customer(customer_id)
