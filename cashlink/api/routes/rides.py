# cashlink/api/routes/rides.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cashlink.api.dependencies import get_actor_id, get_ride_service
from cashlink.api.schemas import CompleteRideRequest, CreateRideRequest, ReasonRequest, TransitionResponse
from cashlink.core.rides.models import RideBooking
from cashlink.core.rides.service import RideBookingService

router = APIRouter(prefix="/rides", tags=["Rides"])

RideResponse = TransitionResponse[RideBooking]


@router.post("/", response_model=RideBooking, status_code=201)
async def create_ride(
    request: CreateRideRequest,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    return await service.create(
        customer_id=actor_id,
        driver_id=request.driver_id,
        service_type=request.service_type,
        pickup_location=request.pickup_location,
        dropoff_location=request.dropoff_location,
        distance_km=request.distance_km,
        notes=request.notes,
    )


@router.get("/mine", response_model=list[RideBooking])
async def list_my_rides(
    limit: int = Query(50, ge=1, le=200),
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    return await service.list_for_customer(actor_id, limit=limit)


@router.get("/active", response_model=list[RideBooking])
async def list_active_rides(
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    """Активные заказы водителя (pending, accepted, in_progress)."""
    return await service.list_active_for_driver(actor_id)


@router.get("/{booking_id}", response_model=RideBooking)
async def get_ride(
    booking_id: str,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    return await service.get(booking_id, actor_id)


@router.post("/{booking_id}/accept", response_model=RideResponse)
async def accept_ride(
    booking_id: str,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    return RideResponse.from_result(await service.accept(booking_id, actor_id))


@router.post("/{booking_id}/reject", response_model=RideResponse)
async def reject_ride(
    booking_id: str,
    request: Optional[ReasonRequest] = None,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    reason = request.reason if request else None
    return RideResponse.from_result(await service.reject(booking_id, actor_id, reason))


@router.post("/{booking_id}/cancel", response_model=RideResponse)
async def cancel_ride(
    booking_id: str,
    request: Optional[ReasonRequest] = None,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    reason = request.reason if request else None
    return RideResponse.from_result(await service.cancel(booking_id, actor_id, reason))


@router.post("/{booking_id}/start", response_model=RideResponse)
async def start_ride(
    booking_id: str,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    return RideResponse.from_result(await service.start_ride(booking_id, actor_id))


@router.post("/{booking_id}/complete", response_model=RideResponse)
async def complete_ride(
    booking_id: str,
    request: Optional[CompleteRideRequest] = None,
    actor_id: str = Depends(get_actor_id),
    service: RideBookingService = Depends(get_ride_service),
):
    driver_rating = request.driver_rating if request else None
    return RideResponse.from_result(await service.complete(booking_id, actor_id, driver_rating))
