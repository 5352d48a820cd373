from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException

from dressrental.api.v1.schemas import (
    AvailabilityRequestSchema,
    AvailabilityResponseSchema,
    BookingSchema,
    DressAvailabilitySchema,
)
from dressrental.application.exceptions import BackendUpstreamError
from dressrental.application.use_cases.availability import AvailabilityResolver
from dressrental.application.utils.rental_period import normalize_range
from dressrental.core.config import settings
from dressrental.wiring.dependencies import get_availability_resolver

router = APIRouter()


@router.post("/availability/check", response_model=AvailabilityResponseSchema)
def check_availability(
    req: AvailabilityRequestSchema,
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
):
    start, end = normalize_range(req.start, req.end)
    try:
        result = resolver.check_availability(req.dress_ids, start, end)
        reserved = resolver.reserved_today(req.dress_ids, datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)))
    except BackendUpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))

    items = []
    for dress_id, available in result.available.items():
        booking = result.bookings.get(dress_id)
        items.append(
            DressAvailabilitySchema(
                dress_id=dress_id,
                available=available,
                reserved_today=reserved.get(dress_id, False),
                current_booking=BookingSchema(start=booking.start, end=booking.end) if booking else None,
            )
        )
    return AvailabilityResponseSchema(
        items=items,
        all_available=result.all_available,
        degraded=result.degraded,
        warning=result.warning,
    )
