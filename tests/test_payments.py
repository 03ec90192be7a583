"""Tests for payment reconciliation."""

import asyncio

import pytest

from shoot_workflow.domain.auth import AuthContext, Role
from shoot_workflow.domain.errors import (
    AuthenticationMissing,
    NothingToPay,
    TransitionNotAllowed,
    ValidationFailure,
)
from shoot_workflow.domain.shoots import PaymentSummary, ShootRecord
from shoot_workflow.services.payments import (
    BatchSelection,
    PaymentService,
    apply_payment,
    eligible_for_batch,
    is_paid,
    remaining_balance,
    total_due,
    view_for,
)
from tests.conftest import TODAY, FakeShootsApiClient, make_shoot


def _batch() -> list[ShootRecord]:
    return [
        make_shoot("a", total_quote=100.0, total_paid=90.0),
        make_shoot("b", total_quote=50.0, total_paid=50.0),
        make_shoot("c", total_quote=25.50, total_paid=0.0),
    ]


def test_balance_and_paid_threshold() -> None:
    payment = PaymentSummary(total_quote=250.0, total_paid=100.0)

    assert remaining_balance(payment) == 150.0
    assert is_paid(PaymentSummary(total_quote=100.0, total_paid=99.995))
    assert not is_paid(PaymentSummary(total_quote=100.0, total_paid=99.0))


def test_batch_eligibility_and_total() -> None:
    shoots = _batch()

    assert [shoot.id for shoot in eligible_for_batch(shoots)] == ["a", "c"]
    assert total_due(shoots) == pytest.approx(35.50)


def test_batch_selection_starts_with_all_unpaid_selected() -> None:
    selection = BatchSelection(_batch())

    assert selection.selected_ids == {"a", "c"}
    assert selection.total == pytest.approx(35.50)

    selection.toggle("a")
    assert selection.total == pytest.approx(25.50)

    selection.toggle("b")
    assert "b" not in selection.selected_ids


def test_view_hides_amounts_from_non_admins() -> None:
    shoot = make_shoot(total_quote=250.0, total_paid=100.0)

    client_view = view_for(Role.CLIENT, shoot)
    admin_view = view_for(Role.SUPERADMIN, shoot)

    assert client_view.is_paid is False
    assert client_view.total_quote is None
    assert client_view.remaining_balance is None
    assert admin_view.remaining_balance == 150.0
    assert admin_view.total_paid == 100.0


def test_apply_payment_is_clamped_to_quote() -> None:
    payment = PaymentSummary(total_quote=100.0, total_paid=60.0)

    updated = apply_payment(payment, 80.0, "manual", TODAY)

    assert updated.total_paid == 100.0
    assert updated.last_payment_type == "manual"
    assert updated.last_payment_date == TODAY


def test_mark_paid_settles_balance_once(admin) -> None:
    client = FakeShootsApiClient()
    service = PaymentService(client, today=lambda: TODAY)
    shoot = make_shoot(total_quote=250.0, total_paid=100.0)

    first = asyncio.run(service.mark_paid(admin, shoot))
    second = asyncio.run(service.mark_paid(admin, first.shoot))

    assert client.calls == [
        ("POST", "shoots/s-1/mark-paid", {"payment_type": "manual", "amount": 150.0})
    ]
    assert first.applied_amount == 150.0
    assert first.shoot.payment.total_paid == 250.0
    assert is_paid(first.shoot.payment)
    assert first.notice.title == "Success"
    assert second.applied_amount == 0.0
    assert second.notice.title == "Already Paid"
    assert second.shoot.payment.total_paid == 250.0


def test_mark_paid_requires_admin(client_auth) -> None:
    client = FakeShootsApiClient()
    service = PaymentService(client)

    with pytest.raises(TransitionNotAllowed):
        asyncio.run(service.mark_paid(client_auth, make_shoot(total_quote=10.0)))

    assert client.calls == []


def test_mark_paid_failure_leaves_shoot_unchanged(admin) -> None:
    client = FakeShootsApiClient()
    client.queue("shoots/s-1/mark-paid", status_code=400, body={})
    service = PaymentService(client)
    shoot = make_shoot(total_quote=40.0)

    with pytest.raises(ValidationFailure) as excinfo:
        asyncio.run(service.mark_paid(admin, shoot))

    assert excinfo.value.user_message == "Failed to mark as paid"
    assert shoot.payment.total_paid == 0.0


def test_mark_paid_many_reports_partial_failure(admin) -> None:
    client = FakeShootsApiClient()
    client.queue("shoots/c/mark-paid", status_code=500, body={"message": "Down"})
    service = PaymentService(client, today=lambda: TODAY)

    result = asyncio.run(service.mark_paid_many(admin, _batch()))

    assert [shoot.id for shoot in result.paid] == ["a"]
    assert list(result.failed) == ["c"]
    assert result.failed["c"].user_message == "Down"
    assert result.notice.is_error
    assert sorted(client.paths()) == ["shoots/a/mark-paid", "shoots/c/mark-paid"]


def test_mark_paid_many_success_notice(admin) -> None:
    service = PaymentService(FakeShootsApiClient(), today=lambda: TODAY)

    result = asyncio.run(service.mark_paid_many(admin, _batch()))

    assert result.failed == {}
    assert result.notice.description == "2 shoot(s) marked as paid."


def test_start_checkout_posts_unpaid_shoots(client_auth) -> None:
    client = FakeShootsApiClient()
    client.queue(
        "payments/multiple-shoots",
        body={"checkoutUrl": "https://pay.example.test/session/1"},
    )
    service = PaymentService(client)

    session = asyncio.run(service.start_checkout(client_auth, _batch()))

    assert session.checkout_url == "https://pay.example.test/session/1"
    assert session.shoot_ids == ["a", "c"]
    assert client.calls[0][2] == {"shoot_ids": ["a", "c"]}


def test_start_checkout_without_url_fails(client_auth) -> None:
    client = FakeShootsApiClient()
    client.queue("payments/multiple-shoots", body={"success": True})
    service = PaymentService(client)

    with pytest.raises(ValidationFailure):
        asyncio.run(service.start_checkout(client_auth, _batch()))


def test_start_checkout_with_nothing_unpaid(client_auth) -> None:
    client = FakeShootsApiClient()
    service = PaymentService(client)
    paid = [make_shoot(total_quote=10.0, total_paid=10.0)]

    with pytest.raises(NothingToPay):
        asyncio.run(service.start_checkout(client_auth, paid))

    assert client.calls == []


def test_start_checkout_requires_token() -> None:
    service = PaymentService(FakeShootsApiClient())
    auth = AuthContext(token="", role=Role.CLIENT)

    with pytest.raises(AuthenticationMissing):
        asyncio.run(service.start_checkout(auth, _batch()))


def test_repeated_shoot_is_counted_once() -> None:
    shoots = [*_batch(), make_shoot("a", total_quote=100.0, total_paid=90.0)]

    assert [shoot.id for shoot in eligible_for_batch(shoots)] == ["a", "c"]
    assert total_due(shoots) == pytest.approx(35.50)
    assert BatchSelection(shoots).total == pytest.approx(35.50)


def test_mark_paid_many_posts_once_per_shoot(admin) -> None:
    client = FakeShootsApiClient()
    service = PaymentService(client, today=lambda: TODAY)
    shoot = make_shoot("a", total_quote=100.0, total_paid=90.0)

    result = asyncio.run(service.mark_paid_many(admin, [shoot, shoot]))

    assert client.paths() == ["shoots/a/mark-paid"]
    assert [paid.id for paid in result.paid] == ["a"]
    assert result.notice.description == "1 shoot(s) marked as paid."


def test_start_checkout_sends_each_shoot_once(client_auth) -> None:
    client = FakeShootsApiClient()
    client.queue("payments/multiple-shoots", body={"checkoutUrl": "https://pay.test"})
    service = PaymentService(client)
    shoots = [*_batch(), *_batch()]

    session = asyncio.run(service.start_checkout(client_auth, shoots))

    assert session.shoot_ids == ["a", "c"]
    assert client.calls[0][2] == {"shoot_ids": ["a", "c"]}
