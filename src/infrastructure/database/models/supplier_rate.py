"""
Supplier rate SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, Float, Index, Integer, String

from .base import BaseModel


class SupplierRateModel(BaseModel):
    """Hourly rate a supplier charges for a service level in an area."""

    __tablename__ = "supplier_rates"

    supplier_id = Column(Integer, nullable=False, index=True)
    service_type = Column(String(100), nullable=False)
    service_level = Column(String(30), nullable=False)
    country_code = Column(String(2), nullable=False)
    city_name = Column(String(100))
    hourly_rate_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    offers_out_of_hours = Column(Boolean, nullable=False, default=True)
    is_serviceable = Column(Boolean, nullable=False, default=True, index=True)
    base_latitude = Column(Float)
    base_longitude = Column(Float)

    __table_args__ = (
        Index(
            "idx_supplier_rates_lookup",
            "service_type",
            "service_level",
            "country_code",
            "city_name",
        ),
        Index(
            "idx_supplier_rates_unique",
            "supplier_id",
            "service_type",
            "service_level",
            "country_code",
            "city_name",
            unique=True,
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<SupplierRate(supplier_id={self.supplier_id}, "
            f"service={self.service_type}, rate={self.hourly_rate_cents})>"
        )
