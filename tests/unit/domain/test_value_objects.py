"""
Unit tests for domain value objects and entities.
"""

from datetime import datetime, timezone

import pytest

from src.domain.entities.job_history import LocationSample, TrackingType
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.entities.supplier_rate import SupplierRate
from src.domain.value_objects.actor import Actor, ActorRole
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.job_status import JobAction, JobStatus
from src.domain.value_objects.price_breakdown import RemoteSiteFee
from src.domain.value_objects.service_level import ServiceLevel


class TestJobStatus:
    """Test cases for JobStatus."""

    def test_final_statuses(self):
        final = {status for status in JobStatus if status.is_final()}

        assert final == {JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.DECLINED}

    def test_statuses_awaiting_supplier(self):
        assert JobStatus.PENDING_SUPPLIER_ACCEPTANCE.awaits_supplier()
        assert JobStatus.ASSIGNED_TO_SUPPLIER.awaits_supplier()
        assert not JobStatus.SUPPLIER_ACCEPTED.awaits_supplier()

    def test_engineer_active_statuses(self):
        assert JobStatus.EN_ROUTE.is_engineer_active()
        assert JobStatus.ON_SITE.is_engineer_active()
        assert not JobStatus.SENT_TO_ENGINEER.is_engineer_active()
        assert not JobStatus.COMPLETED.is_engineer_active()

    def test_actions_requiring_reason(self):
        assert JobAction.CANCEL.requires_reason()
        assert JobAction.DECLINE.requires_reason()
        assert not JobAction.ACCEPT.requires_reason()


class TestServiceLevel:
    """Test cases for ServiceLevel parsing."""

    def test_parse_accepts_aliases(self):
        assert ServiceLevel.parse("same_day") == ServiceLevel.SAME_BUSINESS_DAY
        assert ServiceLevel.parse("next_day") == ServiceLevel.NEXT_BUSINESS_DAY
        assert ServiceLevel.parse("scheduled") == ServiceLevel.SCHEDULED

    def test_parse_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            ServiceLevel.parse("whenever")


class TestActor:
    """Test cases for Actor identity."""

    def test_supplier_requires_supplier_id(self):
        with pytest.raises(ValueError):
            Actor(role=ActorRole.SUPPLIER)

    def test_engineer_requires_token(self):
        with pytest.raises(ValueError):
            Actor(role=ActorRole.ENGINEER)

    def test_labels(self):
        assert Actor.supplier(42).label == "supplier:42"
        assert Actor.engineer("t" * 64).label == "engineer"
        assert Actor.customer(email="buyer@example.com").label == "customer:buyer@example.com"
        assert Actor.admin().label == "admin:unknown"


class TestCoordinates:
    """Test cases for Coordinates."""

    def test_valid_coordinates(self):
        coords = Coordinates(53.8, -1.55)

        assert coords.to_dict() == {"latitude": 53.8, "longitude": -1.55}

    @pytest.mark.parametrize("latitude,longitude", [(91.0, 0.0), (0.0, -181.0)])
    def test_out_of_range(self, latitude, longitude):
        with pytest.raises(ValueError):
            Coordinates(latitude, longitude)


class TestRemoteSiteFee:
    """Test cases for RemoteSiteFee."""

    def test_zero_fee_does_not_apply(self):
        assert not RemoteSiteFee.zero().applies

    def test_split_must_add_up(self):
        with pytest.raises(ValueError):
            RemoteSiteFee(customer_cents=800, supplier_cents=637, platform_cents=159)

    def test_negative_share_rejected(self):
        with pytest.raises(ValueError):
            RemoteSiteFee(customer_cents=0, supplier_cents=10, platform_cents=-10)


class TestJob:
    """Test cases for the Job entity."""

    def test_requires_customer(self, make_job):
        with pytest.raises(ValueError):
            make_job(customer_id=None, customer_email=None)

    def test_requires_positive_duration(self, make_job):
        with pytest.raises(ValueError):
            make_job(estimated_duration_minutes=0)

    def test_coerces_wire_values(self, make_job):
        job = make_job(status="on_site", service_level="same_day")

        assert job.status == JobStatus.ON_SITE
        assert job.service_level == ServiceLevel.SAME_BUSINESS_DAY

    def test_owner_email_is_case_insensitive(self, make_job):
        job = make_job(customer_id=None, customer_email="Buyer@Example.com")

        assert job.is_owned_by(None, "buyer@example.COM")
        assert not job.is_owned_by("cust-2", "other@example.com")

    def test_apply_remote_site_fee(self, make_job):
        job = make_job()

        job.apply_remote_site_fee(
            RemoteSiteFee(
                customer_cents=796,
                supplier_cents=637,
                platform_cents=159,
                distance_km=107.96,
                reference_city="Leeds",
            )
        )

        assert job.remote_site_fee.customer_cents == 796
        assert job.nearest_major_city == "Leeds"
        assert job.remote_site_fee_km == 107.96


class TestSiteVisitReport:
    """Test cases for SiteVisitReport."""

    def test_complete_report(self):
        report = SiteVisitReport(
            engineer_name="Jane Smith", signature_data="data:image/png;base64,AAA",
            findings="Faulty patch panel replaced",
        )

        assert report.is_complete()
        assert report.to_dict()["signed"] is True

    def test_missing_fields(self):
        report = SiteVisitReport(engineer_name=" ", signature_data="")

        assert report.missing_fields() == [
            "engineer_name",
            "signature_data",
            "work_completed",
        ]


class TestSupplierRate:
    """Test cases for SupplierRate coverage."""

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            SupplierRate(1, "network_install", "scheduled", "US", hourly_rate_cents=0)

    def test_covers(self):
        rate = SupplierRate(
            1, "network_install", "scheduled", "US", 5000, offers_out_of_hours=False
        )
        closed = SupplierRate(
            2, "network_install", "scheduled", "US", 5000, is_serviceable=False
        )

        assert rate.covers(is_out_of_hours=False)
        assert not rate.covers(is_out_of_hours=True)
        assert not closed.covers(is_out_of_hours=False)


class TestLocationSample:
    """Test cases for LocationSample."""

    def test_coerces_tracking_type(self):
        sample = LocationSample(
            latitude=40.7,
            longitude=-74.0,
            recorded_at=datetime(2024, 3, 12, tzinfo=timezone.utc),
            tracking_type="en_route",
        )

        assert sample.tracking_type == TrackingType.EN_ROUTE

    def test_rejects_invalid_latitude(self):
        with pytest.raises(ValueError):
            LocationSample(
                latitude=95.0,
                longitude=0.0,
                recorded_at=datetime(2024, 3, 12, tzinfo=timezone.utc),
            )
