"""
Tests for the payment plan ledger.
"""
from datetime import date
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from app.models.exchange_rate import Currency
from app.models.payment_plan import PaymentPlan, PlanCategory, PlanPayment
from app.schemas.payment_plan import PaymentPlanCreate, PaymentPlanUpdate, PlanPaymentCreate
from app.services import payment_plan_service

RATE = Decimal("1000")  # ARS per USD


def make_plan(db, trip, total, currency=Currency.USD, installments_total=4, name="Hotel Disney"):
    data = PaymentPlanCreate(
        name=name,
        category=PlanCategory.HOTEL,
        currency=currency,
        total_amount=Decimal(str(total)),
        installments_total=installments_total,
        start_date=date(2026, 6, 1),
    )
    return payment_plan_service.create_plan(trip.id, data, db, rate=RATE)


def pay(db, trip, plan, number, amount, payer, rate=RATE):
    data = PlanPaymentCreate(installment_number=number, amount=Decimal(str(amount)), payer_id=payer.id)
    return payment_plan_service.add_plan_payment(plan.id, trip.id, data, db, rate=rate)


def test_create_plan_locks_base_amount(db, trip):
    plan = make_plan(db, trip, 2000000, currency=Currency.ARS)
    assert plan.total_amount_base == Decimal("2000.00")


def test_plan_progress(db, trip, juan, vale):
    plan = make_plan(db, trip, 1000)
    pay(db, trip, plan, 1, 250, juan)
    pay(db, trip, plan, 2, 250, vale)

    [item] = payment_plan_service.list_plans_with_progress(trip.id, db)
    assert item.progress.total_paid == Decimal("500")
    assert item.progress.remaining == Decimal("500")
    assert item.progress.progress == 50
    assert item.remaining_base == Decimal("500")


def test_plan_progress_is_capped(db, trip, juan):
    plan = make_plan(db, trip, 100, installments_total=1)
    pay(db, trip, plan, 1, 150, juan)

    [item] = payment_plan_service.list_plans_with_progress(trip.id, db)
    assert item.progress.progress == 100
    assert item.progress.remaining == Decimal("0")
    assert item.remaining_base == Decimal("0")


def test_summary_in_usd(db, trip, juan, vale):
    usd_plan = make_plan(db, trip, 1000, name="Flights")
    ars_plan = make_plan(db, trip, 1000000, currency=Currency.ARS, name="Insurance")
    pay(db, trip, usd_plan, 1, 500, juan)
    pay(db, trip, ars_plan, 1, 250000, vale)

    summary = payment_plan_service.summarize_plans(payment_plan_service.list_plans_with_progress(trip.id, db))
    assert summary.plan_count == 2
    assert summary.total_committed == Decimal("2000")
    assert summary.total_paid == Decimal("750")
    assert summary.total_remaining == Decimal("1250")
    assert summary.progress == 38  # 37.5 rounds half up
    assert summary.paid_by == {juan.id: Decimal("500"), vale.id: Decimal("250")}


def test_summary_progress_not_capped(db, trip, juan):
    plan = make_plan(db, trip, 100, installments_total=1)
    pay(db, trip, plan, 1, 150, juan)

    summary = payment_plan_service.summarize_plans(payment_plan_service.list_plans_with_progress(trip.id, db))
    assert summary.progress == 150


def test_empty_summary(db, trip):
    summary = payment_plan_service.summarize_plans(payment_plan_service.list_plans_with_progress(trip.id, db))
    assert summary.plan_count == 0
    assert summary.progress == 0
    assert summary.paid_by == {}


def test_update_total_recomputes_base(db, trip):
    plan = make_plan(db, trip, 1000000, currency=Currency.ARS)
    updated = payment_plan_service.update_plan(
        plan.id, trip.id, PaymentPlanUpdate(total_amount=Decimal("1500000")), db, rate=RATE
    )
    assert updated.total_amount_base == Decimal("1500.00")


def test_update_name_keeps_base(db, trip):
    plan = make_plan(db, trip, 1000000, currency=Currency.ARS)
    updated = payment_plan_service.update_plan(
        plan.id, trip.id, PaymentPlanUpdate(name="  Hotel Contemporary "), db, rate=Decimal("2000")
    )
    assert updated.name == "Hotel Contemporary"
    assert updated.total_amount_base == Decimal("1000.00")


def test_payment_rejected_for_unknown_payer(db, trip):
    plan = make_plan(db, trip, 1000)
    data = PlanPaymentCreate(installment_number=1, amount=Decimal("100"), payer_id=999)
    assert payment_plan_service.add_plan_payment(plan.id, trip.id, data, db) is None


def test_payment_on_missing_plan(db, trip, juan):
    data = PlanPaymentCreate(installment_number=1, amount=Decimal("100"), payer_id=juan.id)
    assert payment_plan_service.add_plan_payment(999, trip.id, data, db) is None


def test_delete_plan_cascades(db, trip, juan):
    plan = make_plan(db, trip, 1000)
    pay(db, trip, plan, 1, 100, juan)

    assert payment_plan_service.delete_plan(plan.id, trip.id, db) is True
    assert db.query(PaymentPlan).count() == 0
    assert db.query(PlanPayment).count() == 0
    assert payment_plan_service.delete_plan(plan.id, trip.id, db) is True


def test_delete_payment(db, trip, juan):
    plan = make_plan(db, trip, 1000)
    payment = pay(db, trip, plan, 1, 100, juan)

    assert payment_plan_service.delete_plan_payment(payment.id, trip.id, db) is True
    [item] = payment_plan_service.list_plans_with_progress(trip.id, db)
    assert item.progress.installments_paid == 0


def test_next_payment(db, trip, juan):
    plan = make_plan(db, trip, 1000, installments_total=4)
    pay(db, trip, plan, 1, 250, juan)
    db.refresh(plan)

    assert payment_plan_service.next_payment(plan) == {
        "installment_number": 2,
        "amount": Decimal("250.00"),
    }


def test_create_plan_store_failure(db, trip, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "commit", broken_commit)
    assert make_plan(db, trip, 1000) is None
    assert db.query(PaymentPlan).count() == 0


def test_plan_payment_store_failure(db, trip, juan, monkeypatch):
    plan = make_plan(db, trip, 1000)

    def broken_commit():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "commit", broken_commit)
    assert pay(db, trip, plan, 1, 100, juan) is None
    assert db.query(PlanPayment).count() == 0
