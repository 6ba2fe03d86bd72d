import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional, Dict, Any
from evently.database.dynamodb import get_db_connection
from evently.exceptions import EventlyError
from evently.schemas.registration import RegistrationCreate, RegistrationStatusUpdate
from evently.services.analytics_service import AnalyticsService
from evently.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["registrations"])


def get_registration_service():
    """Dependency to get RegistrationService instance"""
    db = get_db_connection()
    return RegistrationService(db)


def get_analytics_service():
    """Dependency to get AnalyticsService instance"""
    db = get_db_connection()
    return AnalyticsService(db)


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
async def create_registration(
    registration_data: RegistrationCreate,
    registration_service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    """Register an attendee for an event"""
    try:
        registration = registration_service.create_registration(
            registration_data.eventId,
            registration_data.attendeeName,
            registration_data.attendeeEmail,
            registration_data.attendeePhone,
            registration_data.ticketType,
        )
        return {
            "success": True,
            "message": "Registration successful!",
            "registration": registration.model_dump(),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Registration creation error")
        raise HTTPException(
            status_code=500,
            detail="Failed to create registration. Please try again.",
        )


@router.get("/analytics")
async def get_analytics(
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Monthly and category figures for the admin dashboard"""
    try:
        analytics = analytics_service.get_analytics()
        return {"success": True, "analytics": analytics.model_dump()}
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching analytics")
        raise HTTPException(status_code=500, detail="Failed to fetch analytics data")


@router.get("/user/{identifier}")
async def get_user_registrations(
    identifier: str,
    type: Optional[str] = Query(
        "email", description="Match the identifier as 'email' or 'phone'"
    ),
    registration_service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    """Registrations of one attendee by email or phone"""
    try:
        registrations = registration_service.get_user_registrations(identifier, type)
        return {
            "success": True,
            "registrations": [r.model_dump() for r in registrations],
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching user registrations")
        raise HTTPException(status_code=500, detail="Failed to fetch registrations")


@router.get("/match/{email}")
async def match_registrations(
    email: str,
    registration_service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    """Find registrations made with a signed-in user's email"""
    try:
        registrations = registration_service.match_registrations(email)
        return {
            "success": True,
            "registrations": [r.model_dump() for r in registrations],
            "count": len(registrations),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error matching registrations")
        raise HTTPException(status_code=500, detail="Failed to match registrations")


@router.put("/{registration_id}/status")
async def update_registration_status(
    registration_id: str,
    status_data: RegistrationStatusUpdate,
    registration_service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    try:
        registration = registration_service.update_status(
            registration_id, status_data.status
        )
        return {
            "success": True,
            "message": "Registration status updated",
            "registration": registration.model_dump(),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error updating registration status")
        raise HTTPException(
            status_code=500, detail="Failed to update registration status"
        )


@router.get("/event/{event_id}")
async def get_event_registrations(
    event_id: str,
    status: Optional[str] = Query(None, description="Filter by registration status"),
    registration_service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    """All registrations for an event"""
    try:
        registrations = registration_service.get_event_registrations(event_id, status)
        return {
            "success": True,
            "registrations": [r.model_dump() for r in registrations],
            "count": len(registrations),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching event registrations")
        raise HTTPException(
            status_code=500, detail="Failed to fetch event registrations"
        )
