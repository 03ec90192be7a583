"""Payment reconciliation for shoots.

Balances are derived from the quote and paid totals; amounts are only
exposed to admin-tier roles. Manual "mark as paid" settles the outstanding
balance once: a shoot that is already paid is left as is, and applied
amounts are clamped to the quote.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import date

from shoot_workflow.adapters.shoots_api_client import ShootsApiClient
from shoot_workflow.domain.auth import AuthContext, Role
from shoot_workflow.domain.errors import (
    NothingToPay,
    TransitionNotAllowed,
    ValidationFailure,
    WorkflowError,
)
from shoot_workflow.domain.shoots import PaymentSummary, ShootRecord
from shoot_workflow.services.gateway import raise_for_failure, server_message
from shoot_workflow.services.notices import Notice

PAID_EPSILON = 0.01

_logger = logging.getLogger(__name__)


def remaining_balance(payment: PaymentSummary) -> float:
    """Return the outstanding amount, rounded to cents."""
    return round(payment.total_quote - payment.total_paid, 2)


def is_paid(payment: PaymentSummary) -> bool:
    return remaining_balance(payment) <= PAID_EPSILON


@dataclass(frozen=True)
class PaymentView:
    """Role-filtered payment figures; amounts are None for non-admins."""

    is_paid: bool
    base_quote: float | None = None
    tax_amount: float | None = None
    total_quote: float | None = None
    total_paid: float | None = None
    remaining_balance: float | None = None


def view_for(role: Role, shoot: ShootRecord) -> PaymentView:
    """Return what ``role`` may see of the shoot's payment."""
    payment = shoot.payment
    if not role.is_admin:
        return PaymentView(is_paid=is_paid(payment))
    return PaymentView(
        is_paid=is_paid(payment),
        base_quote=payment.base_quote,
        tax_amount=payment.tax_amount,
        total_quote=payment.total_quote,
        total_paid=payment.total_paid,
        remaining_balance=remaining_balance(payment),
    )


def eligible_for_batch(shoots: Iterable[ShootRecord]) -> list[ShootRecord]:
    """Return shoots that still have a balance to pay, each id once."""
    unique: dict[str, ShootRecord] = {}
    for shoot in shoots:
        unique.setdefault(shoot.id, shoot)
    return [shoot for shoot in unique.values() if not is_paid(shoot.payment)]


def total_due(shoots: Iterable[ShootRecord]) -> float:
    """Sum the outstanding balances of the eligible shoots."""
    return round(
        sum(remaining_balance(shoot.payment) for shoot in eligible_for_batch(shoots)),
        2,
    )


@dataclass
class BatchSelection:
    """Selection of unpaid shoots for a batch payment.

    All eligible shoots start selected; paid shoots can never be selected.
    """

    shoots: list[ShootRecord]
    selected_ids: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.shoots = eligible_for_batch(self.shoots)
        self.selected_ids = {shoot.id for shoot in self.shoots}

    def toggle(self, shoot_id: str) -> None:
        if shoot_id in self.selected_ids:
            self.selected_ids.discard(shoot_id)
        elif any(shoot.id == shoot_id for shoot in self.shoots):
            self.selected_ids.add(shoot_id)

    @property
    def selected(self) -> list[ShootRecord]:
        return [shoot for shoot in self.shoots if shoot.id in self.selected_ids]

    @property
    def total(self) -> float:
        return total_due(self.selected)


@dataclass(frozen=True)
class CheckoutSession:
    """Externally hosted checkout for a batch of shoots."""

    checkout_url: str
    shoot_ids: list[str]


@dataclass(frozen=True)
class MarkPaidResult:
    shoot: ShootRecord
    notice: Notice
    applied_amount: float


@dataclass(frozen=True)
class BatchMarkPaidResult:
    """Per-shoot results of a manual batch settlement."""

    paid: list[ShootRecord]
    failed: dict[str, WorkflowError]
    notice: Notice


def apply_payment(
    payment: PaymentSummary,
    amount: float,
    payment_type: str,
    paid_on: date,
) -> PaymentSummary:
    """Add ``amount`` to the paid total without exceeding the quote."""
    total_paid = min(payment.total_quote, round(payment.total_paid + amount, 2))
    total_paid = max(total_paid, payment.total_paid)
    return replace(
        payment,
        total_paid=total_paid,
        last_payment_date=paid_on,
        last_payment_type=payment_type,
    )


@dataclass
class PaymentService:
    """Settlement paths: processor checkout and manual mark-as-paid."""

    client: ShootsApiClient
    today: Callable[[], date] = date.today

    async def start_checkout(
        self, auth: AuthContext, shoots: Iterable[ShootRecord]
    ) -> CheckoutSession:
        """Create a processor checkout for the unpaid shoots given."""
        token = auth.require_token()
        shoot_ids = [shoot.id for shoot in eligible_for_batch(shoots)]
        if not shoot_ids:
            raise NothingToPay()
        response = await self.client.post(
            "payments/multiple-shoots", token, {"shoot_ids": shoot_ids}
        )
        fallback = "Failed to process payment. Please try again."
        raise_for_failure(response, fallback_message=fallback, title="Error")
        checkout_url = (response.body or {}).get("checkoutUrl")
        if not isinstance(checkout_url, str) or not checkout_url:
            raise ValidationFailure(
                server_message(response.body) or fallback,
                "Error",
                response.status_code,
            )
        _logger.info("Checkout created for %s shoot(s)", len(shoot_ids))
        return CheckoutSession(checkout_url=checkout_url, shoot_ids=shoot_ids)

    async def mark_paid(
        self,
        auth: AuthContext,
        shoot: ShootRecord,
        payment_type: str = "manual",
    ) -> MarkPaidResult:
        """Settle the outstanding balance of ``shoot`` manually."""
        if not auth.is_admin:
            raise TransitionNotAllowed("Only admins can mark shoots as paid.")
        token = auth.require_token()
        if is_paid(shoot.payment):
            return MarkPaidResult(
                shoot=shoot,
                notice=Notice(
                    title="Already Paid", description="This shoot is already fully paid"
                ),
                applied_amount=0.0,
            )
        amount = remaining_balance(shoot.payment)
        response = await self.client.post(
            f"shoots/{shoot.id}/mark-paid",
            token,
            {"payment_type": payment_type, "amount": amount},
        )
        raise_for_failure(
            response, fallback_message="Failed to mark as paid", title="Error"
        )
        updated = replace(
            shoot,
            payment=apply_payment(shoot.payment, amount, payment_type, self.today()),
        )
        _logger.info(
            "Shoot %s marked as paid (%.2f, %s)", shoot.id, amount, payment_type
        )
        return MarkPaidResult(
            shoot=updated,
            notice=Notice(title="Success", description="Shoot marked as paid"),
            applied_amount=amount,
        )

    async def mark_paid_many(
        self,
        auth: AuthContext,
        shoots: Iterable[ShootRecord],
        payment_type: str = "manual",
    ) -> BatchMarkPaidResult:
        """Mark every unpaid shoot as paid; one failure does not stop others."""
        if not auth.is_admin:
            raise TransitionNotAllowed("Only admins can mark shoots as paid.")
        targets = eligible_for_batch(shoots)
        if not targets:
            raise NothingToPay()
        results = await asyncio.gather(
            *(self.mark_paid(auth, shoot, payment_type) for shoot in targets),
            return_exceptions=True,
        )
        paid: list[ShootRecord] = []
        failed: dict[str, WorkflowError] = {}
        for shoot, result in zip(targets, results, strict=True):
            if isinstance(result, WorkflowError):
                failed[shoot.id] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                paid.append(result.shoot)
        if failed:
            notice = Notice(
                title="Error",
                description=(
                    f"{len(paid)} shoot(s) marked as paid, "
                    f"{len(failed)} failed. Please try again."
                ),
                variant="destructive",
            )
        else:
            notice = Notice(
                title="Success", description=f"{len(paid)} shoot(s) marked as paid."
            )
        return BatchMarkPaidResult(paid=paid, failed=failed, notice=notice)
