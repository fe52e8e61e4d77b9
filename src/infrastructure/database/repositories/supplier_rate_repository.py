"""Supplier rate repository implementation."""

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.repositories import SupplierRateRepositoryInterface
from src.config.logging import get_logger
from src.domain.entities.supplier_rate import SupplierRate
from src.infrastructure.database.models.supplier_rate import SupplierRateModel

logger = get_logger(__name__)


class SupplierRateRepository(SupplierRateRepositoryInterface):
    """Supplier rate repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_rates(
        self,
        service_type: str,
        service_level: str,
        country_code: str,
        city_name: Optional[str] = None,
    ) -> List[SupplierRate]:
        """Serviceable rates for the area; city-specific rates win per supplier."""
        stmt = self._area_query(service_type, service_level, country_code, city_name)
        stmt = stmt.where(SupplierRateModel.is_serviceable.is_(True))
        result = await self.db.execute(stmt)

        by_supplier = {}
        for model in result.scalars().all():
            current = by_supplier.get(model.supplier_id)
            if current is None or (current.city_name is None and model.city_name):
                by_supplier[model.supplier_id] = model

        rates = [self._model_to_entity(model) for model in by_supplier.values()]

        logger.debug(
            "Supplier rates found",
            service_type=service_type,
            service_level=service_level,
            country_code=country_code,
            city_name=city_name,
            count=len(rates),
        )

        return rates

    async def get_supplier_rate(
        self,
        supplier_id: int,
        service_type: str,
        service_level: str,
        country_code: str,
        city_name: Optional[str] = None,
    ) -> Optional[SupplierRate]:
        stmt = self._area_query(
            service_type, service_level, country_code, city_name
        ).where(SupplierRateModel.supplier_id == supplier_id)
        result = await self.db.execute(stmt)
        models = result.scalars().all()
        if not models:
            return None

        # Prefer the city-specific rate over the country-wide one
        models = sorted(models, key=lambda model: model.city_name is None)
        return self._model_to_entity(models[0])

    async def create(self, rate: SupplierRate) -> SupplierRate:
        model = SupplierRateModel(
            supplier_id=rate.supplier_id,
            service_type=rate.service_type,
            service_level=rate.service_level,
            country_code=rate.country_code,
            city_name=rate.city_name,
            hourly_rate_cents=rate.hourly_rate_cents,
            currency=rate.currency,
            offers_out_of_hours=rate.offers_out_of_hours,
            is_serviceable=rate.is_serviceable,
            base_latitude=rate.base_latitude,
            base_longitude=rate.base_longitude,
        )
        self.db.add(model)
        await self.db.flush()
        await self.db.refresh(model)

        return self._model_to_entity(model)

    def _area_query(
        self,
        service_type: str,
        service_level: str,
        country_code: str,
        city_name: Optional[str],
    ):
        stmt = select(SupplierRateModel).where(
            SupplierRateModel.service_type == service_type,
            SupplierRateModel.service_level == service_level,
            func.upper(SupplierRateModel.country_code) == country_code.upper(),
        )
        if city_name:
            stmt = stmt.where(
                or_(
                    SupplierRateModel.city_name.is_(None),
                    func.lower(SupplierRateModel.city_name) == city_name.lower(),
                )
            )
        else:
            stmt = stmt.where(SupplierRateModel.city_name.is_(None))
        return stmt

    def _model_to_entity(self, model: SupplierRateModel) -> SupplierRate:
        return SupplierRate(
            id=model.id,
            supplier_id=model.supplier_id,
            service_type=model.service_type,
            service_level=model.service_level,
            country_code=model.country_code,
            city_name=model.city_name,
            hourly_rate_cents=model.hourly_rate_cents,
            currency=model.currency,
            offers_out_of_hours=model.offers_out_of_hours,
            is_serviceable=model.is_serviceable,
            base_latitude=model.base_latitude,
            base_longitude=model.base_longitude,
        )
