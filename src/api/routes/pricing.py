"""Price quotes for prospective bookings; nothing is persisted."""

from fastapi import APIRouter

from src.api.dependencies import EstimatePriceUseCaseDep
from src.api.schemas.pricing import PriceEstimateRequest, PriceEstimateResponse
from src.application.use_cases.estimate_price import EstimatePriceRequest

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/estimate", response_model=PriceEstimateResponse)
async def estimate_price(
    body: PriceEstimateRequest,
    use_case: EstimatePriceUseCaseDep,
):
    """Customer price range across the suppliers covering the request."""
    scheduled_date, scheduled_time = body.split_scheduled_date_time()

    result = await use_case.execute(
        EstimatePriceRequest(
            service_type=body.service_type,
            service_level=body.service_level,
            duration_minutes=body.duration_minutes,
            country=body.country.upper(),
            timezone=body.timezone,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            city=body.city,
            site_latitude=body.site_latitude,
            site_longitude=body.site_longitude,
        )
    )

    return PriceEstimateResponse(
        available=result.available,
        supplier_count=result.supplier_count,
        estimated_price_cents=result.estimated_price_cents,
        min_price_cents=result.min_price_cents,
        max_price_cents=result.max_price_cents,
        remote_site_fee_cents=result.remote_site_fee_cents,
        currency=result.currency,
        is_out_of_hours=result.is_out_of_hours,
        message=result.message,
        warnings=result.warnings,
    )
