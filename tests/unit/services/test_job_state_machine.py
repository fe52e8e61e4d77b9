"""
Unit tests for JobStateMachine.
"""

from datetime import datetime, timezone

import pytest

from src.application.services.job_state_machine import (
    PRICE_LOCK_AT_ACCEPTANCE,
    PRICE_LOCK_AT_CREATION,
    JobStateMachine,
    TransitionPayload,
    available_actions,
    next_status,
)
from src.application.services.pricing_engine import PricingEngine, PricingRules
from src.domain.entities.job_history import LocationSample, TrackingType
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.exceptions.transition_error import (
    ActorNotPermitted,
    InvalidTransition,
    TransitionPayloadError,
)
from src.domain.value_objects.actor import Actor
from src.domain.value_objects.job_status import JobAction as A
from src.domain.value_objects.job_status import JobStatus as S

EDGES = {
    (S.PENDING_SUPPLIER_ACCEPTANCE, A.ACCEPT): S.SUPPLIER_ACCEPTED,
    (S.ASSIGNED_TO_SUPPLIER, A.ACCEPT): S.ACCEPTED,
    (S.SUPPLIER_ACCEPTED, A.ASSIGN_ENGINEER): S.SENT_TO_ENGINEER,
    (S.SENT_TO_ENGINEER, A.ENGINEER_ACCEPT): S.ENGINEER_ACCEPTED,
    (S.SENT_TO_ENGINEER, A.ENGINEER_DECLINE): S.SUPPLIER_ACCEPTED,
    (S.ENGINEER_ACCEPTED, A.EN_ROUTE): S.EN_ROUTE,
    (S.ACCEPTED, A.EN_ROUTE): S.EN_ROUTE,
    (S.EN_ROUTE, A.ON_SITE): S.ON_SITE,
    (S.ON_SITE, A.COMPLETE): S.COMPLETED,
}
for _status in S:
    if _status not in (S.COMPLETED, S.CANCELLED, S.DECLINED):
        EDGES[(_status, A.CANCEL)] = S.CANCELLED
        EDGES[(_status, A.DECLINE)] = S.DECLINED

NOW = datetime(2024, 3, 12, 18, 0, tzinfo=timezone.utc)


def _report(**overrides):
    values = dict(
        engineer_name="Jane Smith",
        signature_data="data:image/png;base64,AAA",
        work_completed="Replaced the faulty switch",
    )
    values.update(overrides)
    return SiteVisitReport(**values)


class TestTransitionTable:
    """Test cases for the transition table."""

    @pytest.mark.parametrize("status", list(S))
    @pytest.mark.parametrize("action", list(A))
    def test_every_status_action_pair(self, status, action):
        assert next_status(status, action) == EDGES.get((status, action))

    @pytest.mark.parametrize("status", [S.COMPLETED, S.CANCELLED, S.DECLINED])
    def test_final_statuses_have_no_actions(self, status):
        assert available_actions(status) == []

    def test_available_actions(self):
        assert available_actions(S.SENT_TO_ENGINEER) == [
            A.DECLINE,
            A.ENGINEER_ACCEPT,
            A.ENGINEER_DECLINE,
            A.CANCEL,
        ]


class TestJobStateMachine:
    """Test cases for transition planning."""

    @pytest.fixture
    def state_machine(self):
        return JobStateMachine(
            PricingEngine(PricingRules()), price_lock_point=PRICE_LOCK_AT_CREATION
        )

    @pytest.fixture
    def accepting_machine(self):
        return JobStateMachine(
            PricingEngine(PricingRules()), price_lock_point=PRICE_LOCK_AT_ACCEPTANCE
        )

    @pytest.fixture
    def engineer(self, engineer_token):
        return Actor.engineer(engineer_token)

    def test_no_edge_is_rejected_before_authorization(self, state_machine, make_job):
        job = make_job()

        with pytest.raises(InvalidTransition) as exc_info:
            state_machine.plan(job, Actor.customer("cust-1"), A.COMPLETE, NOW)

        assert exc_info.value.current_status == "pending_supplier_acceptance"
        assert exc_info.value.action == "complete"

    def test_final_job_rejects_cancel(self, state_machine, make_job):
        job = make_job(status=S.COMPLETED)

        with pytest.raises(InvalidTransition):
            state_machine.plan(
                job, Actor.admin("ops"), A.CANCEL, NOW, TransitionPayload(reason="x")
            )

    def test_supplier_accepts_broadcast_job(self, state_machine, make_job):
        # Arrange
        job = make_job()

        # Act
        plan = state_machine.plan(job, Actor.supplier(7), A.ACCEPT, NOW)

        # Assert
        assert plan.to_status == S.SUPPLIER_ACCEPTED
        assert plan.changes["assigned_supplier_id"] == 7
        assert plan.changes["accepted_at"] == NOW
        assert plan.changes["confirmed_start_date"] == "2024-03-13"
        assert plan.changes["confirmed_start_time"] == "10:00"
        assert plan.event.to_dict()["to_status"] == "supplier_accepted"
        assert plan.event.metadata["supplier_id"] == 7

    def test_accept_with_proposed_start(self, state_machine, make_job):
        payload = TransitionPayload(
            proposed_start_date="2024-03-14", proposed_start_time="11:00"
        )

        plan = state_machine.plan(make_job(), Actor.supplier(7), A.ACCEPT, NOW, payload)

        assert plan.changes["proposed_start_date"] == "2024-03-14"
        assert plan.changes["confirmed_start_date"] == "2024-03-14"
        assert plan.changes["confirmed_start_time"] == "11:00"

    def test_accept_routed_to_another_supplier(self, state_machine, make_job):
        job = make_job(routed_supplier_id=3, status=S.ASSIGNED_TO_SUPPLIER)

        with pytest.raises(ActorNotPermitted):
            state_machine.plan(job, Actor.supplier(7), A.ACCEPT, NOW)

    @pytest.mark.parametrize(
        "actor", [Actor.customer("cust-1"), Actor.admin("ops")], ids=["customer", "admin"]
    )
    def test_only_suppliers_accept(self, state_machine, make_job, actor):
        with pytest.raises(ActorNotPermitted):
            state_machine.plan(make_job(), actor, A.ACCEPT, NOW)

    def test_accept_locks_price_when_configured(self, accepting_machine, make_job):
        # Arrange
        job = make_job(estimated_duration_minutes=120)

        # Act
        plan = accepting_machine.plan(
            job, Actor.supplier(7), A.ACCEPT, NOW, TransitionPayload(hourly_rate_cents=5000)
        )

        # Assert
        assert plan.changes["calculated_price_cents"] == 11500
        assert plan.changes["supplier_payout_cents"] == 10000
        assert plan.changes["platform_revenue_cents"] == 1500
        assert plan.changes["price_locked_at"] == NOW
        assert plan.price_breakdown.hourly_rate_cents == 5000

    def test_accept_without_rate_when_price_unlocked(self, accepting_machine, make_job):
        with pytest.raises(TransitionPayloadError) as exc_info:
            accepting_machine.plan(make_job(), Actor.supplier(7), A.ACCEPT, NOW)

        assert exc_info.value.field_name == "hourly_rate_cents"

    def test_locked_price_is_never_repriced(self, accepting_machine, make_job):
        job = make_job(price_locked_at=NOW, calculated_price_cents=22401)

        plan = accepting_machine.plan(
            job, Actor.supplier(7), A.ACCEPT, NOW, TransitionPayload(hourly_rate_cents=9000)
        )

        assert "calculated_price_cents" not in plan.changes
        assert plan.price_breakdown is None

    def test_assign_engineer(self, state_machine, make_job):
        # Arrange
        job = make_job(status=S.SUPPLIER_ACCEPTED, assigned_supplier_id=7)
        payload = TransitionPayload(
            engineer_name=" Jane Smith ", engineer_email="jane@example.com"
        )

        # Act
        plan = state_machine.plan(job, Actor.supplier(7), A.ASSIGN_ENGINEER, NOW, payload)

        # Assert
        assert plan.to_status == S.SENT_TO_ENGINEER
        assert plan.changes["engineer_name"] == "Jane Smith"
        assert plan.changes["engineer_phone"] is None
        assert plan.history_notes == "Engineer Jane Smith assigned"

    def test_assign_engineer_requires_valid_email(self, state_machine, make_job):
        job = make_job(status=S.SUPPLIER_ACCEPTED, assigned_supplier_id=7)
        payload = TransitionPayload(engineer_name="Jane", engineer_email="jane")

        with pytest.raises(TransitionPayloadError) as exc_info:
            state_machine.plan(job, Actor.supplier(7), A.ASSIGN_ENGINEER, NOW, payload)

        assert exc_info.value.field_name == "engineer_email"

    def test_assign_engineer_by_other_supplier(self, state_machine, make_job):
        job = make_job(status=S.SUPPLIER_ACCEPTED, assigned_supplier_id=7)
        payload = TransitionPayload(engineer_name="Jane", engineer_email="j@example.com")

        with pytest.raises(ActorNotPermitted):
            state_machine.plan(job, Actor.supplier(8), A.ASSIGN_ENGINEER, NOW, payload)

    def test_engineer_accept(self, state_machine, make_job, engineer):
        job = make_job(status=S.SENT_TO_ENGINEER, assigned_supplier_id=7)

        plan = state_machine.plan(job, engineer, A.ENGINEER_ACCEPT, NOW)

        assert plan.to_status == S.ENGINEER_ACCEPTED
        assert plan.changes["engineer_accepted_at"] == NOW
        assert plan.event.actor == "engineer"

    def test_engineer_token_must_match(self, state_machine, make_job):
        job = make_job(status=S.SENT_TO_ENGINEER)

        with pytest.raises(ActorNotPermitted):
            state_machine.plan(job, Actor.engineer("cd" * 32), A.ENGINEER_ACCEPT, NOW)

    def test_engineer_actions_need_engineer_link(self, state_machine, make_job):
        job = make_job(status=S.EN_ROUTE, assigned_supplier_id=7)

        with pytest.raises(ActorNotPermitted):
            state_machine.plan(job, Actor.supplier(7), A.ON_SITE, NOW)

    def test_engineer_decline_returns_job_to_supplier(
        self, state_machine, make_job, engineer
    ):
        # Arrange
        job = make_job(
            status=S.SENT_TO_ENGINEER,
            assigned_supplier_id=7,
            engineer_name="Jane",
            engineer_email="jane@example.com",
        )

        # Act
        plan = state_machine.plan(
            job, engineer, A.ENGINEER_DECLINE, NOW, TransitionPayload(reason="Sick")
        )

        # Assert
        assert plan.to_status == S.SUPPLIER_ACCEPTED
        assert plan.changes["engineer_name"] is None
        assert plan.changes["engineer_email"] is None
        assert plan.event.metadata["declined_engineer_email"] == "jane@example.com"
        assert plan.history_notes == "Engineer declined the job: Sick"

    def test_en_route_records_location(self, state_machine, make_job, engineer):
        # Arrange
        job = make_job(status=S.ENGINEER_ACCEPTED)
        sample = LocationSample(latitude=40.7, longitude=-74.0, recorded_at=NOW)

        # Act
        plan = state_machine.plan(
            job, engineer, A.EN_ROUTE, NOW, TransitionPayload(location=sample)
        )

        # Assert
        assert plan.location.tracking_type == TrackingType.EN_ROUTE
        assert plan.location.job_id == job.id
        assert plan.changes["en_route_at"] == NOW

    def test_complete_requires_report(self, state_machine, make_job, engineer):
        job = make_job(status=S.ON_SITE)

        with pytest.raises(TransitionPayloadError) as exc_info:
            state_machine.plan(job, engineer, A.COMPLETE, NOW)

        assert exc_info.value.field_name == "site_visit_report"

    def test_complete_with_incomplete_report(self, state_machine, make_job, engineer):
        job = make_job(status=S.ON_SITE)
        payload = TransitionPayload(report=_report(signature_data=""))

        with pytest.raises(TransitionPayloadError) as exc_info:
            state_machine.plan(job, engineer, A.COMPLETE, NOW, payload)

        assert exc_info.value.field_name == "signature_data"

    def test_complete_with_submitted_report(self, state_machine, make_job, engineer):
        job = make_job(status=S.ON_SITE)

        plan = state_machine.plan(
            job, engineer, A.COMPLETE, NOW, existing_report=_report(job_id=job.id)
        )

        assert plan.to_status == S.COMPLETED
        assert plan.report is None
        assert plan.changes["completed_at"] == NOW

    def test_complete_with_report_in_payload(self, state_machine, make_job, engineer):
        job = make_job(status=S.ON_SITE)

        plan = state_machine.plan(
            job, engineer, A.COMPLETE, NOW, TransitionPayload(report=_report())
        )

        assert plan.report.job_id == job.id

    def test_customer_cancels_own_job(self, state_machine, make_job):
        # Act
        plan = state_machine.plan(
            make_job(),
            Actor.customer("cust-1"),
            A.CANCEL,
            NOW,
            TransitionPayload(reason="No longer needed"),
        )

        # Assert
        assert plan.to_status == S.CANCELLED
        assert plan.changes["cancellation_reason"] == "No longer needed"
        assert plan.changes["cancelled_by"] == "customer:cust-1"
        assert plan.history_notes == "Job cancelled: No longer needed"
        assert plan.event.reason == "No longer needed"

    def test_cancel_requires_reason(self, state_machine, make_job):
        with pytest.raises(TransitionPayloadError) as exc_info:
            state_machine.plan(
                make_job(), Actor.customer("cust-1"), A.CANCEL, NOW, TransitionPayload()
            )

        assert exc_info.value.field_name == "reason"

    def test_stranger_cannot_cancel(self, state_machine, make_job):
        with pytest.raises(ActorNotPermitted):
            state_machine.plan(
                make_job(),
                Actor.customer("cust-2", "someone@example.com"),
                A.CANCEL,
                NOW,
                TransitionPayload(reason="x"),
            )

    def test_admin_cancels_any_job(self, state_machine, make_job):
        job = make_job(status=S.ON_SITE, assigned_supplier_id=7)

        plan = state_machine.plan(
            job, Actor.admin("ops"), A.CANCEL, NOW, TransitionPayload(reason="Fraud")
        )

        assert plan.changes["cancelled_by"] == "admin:ops"

    def test_routed_supplier_declines(self, state_machine, make_job):
        job = make_job(status=S.ASSIGNED_TO_SUPPLIER, routed_supplier_id=3)

        plan = state_machine.plan(
            job, Actor.supplier(3), A.DECLINE, NOW, TransitionPayload(reason="Busy")
        )

        assert plan.to_status == S.DECLINED

    def test_supplier_cannot_decline_broadcast_job(self, state_machine, make_job):
        with pytest.raises(ActorNotPermitted):
            state_machine.plan(
                make_job(), Actor.supplier(3), A.DECLINE, NOW, TransitionPayload(reason="x")
            )

    def test_engineer_token_never_changes(self, state_machine, make_job, engineer):
        job = make_job(status=S.SENT_TO_ENGINEER, assigned_supplier_id=7)

        for action in (A.ENGINEER_ACCEPT, A.ENGINEER_DECLINE):
            plan = state_machine.plan(job, engineer, action, NOW)
            assert "engineer_token" not in plan.changes
            assert "short_code" not in plan.changes
