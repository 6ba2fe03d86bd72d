import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional, Dict, Any
from evently.database.dynamodb import get_db_connection
from evently.exceptions import EventlyError
from evently.schemas.event import EventCreate, EventOut, EventUpdate
from evently.security import require_admin
from evently.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service():
    """Dependency to get EventService instance"""
    db = get_db_connection()
    return EventService(db)


@router.get("", response_model=Dict[str, Any])
@router.get("/", response_model=Dict[str, Any], include_in_schema=False)
async def list_events(
    limit: Optional[str] = Query(None, description="Page size, at most 50"),
    offset: Optional[str] = Query(None, description="Number of events to skip"),
    category: Optional[str] = Query(None, description="Filter by category, 'all' for none"),
    search: Optional[str] = Query(
        None, description="Case-insensitive match on title, description or tags"
    ),
    event_service: EventService = Depends(get_event_service),
):
    """List events ordered by date with pagination"""
    try:
        events, pagination = event_service.list_events(limit, offset, category, search)
        return {
            "events": [event.model_dump() for event in events],
            "pagination": pagination,
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching events")
        raise HTTPException(status_code=500, detail="Failed to fetch events")


@router.get("/categories", response_model=Dict[str, Any])
async def list_categories(event_service: EventService = Depends(get_event_service)):
    try:
        return {"success": True, "categories": event_service.get_categories()}
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching categories")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: str, event_service: EventService = Depends(get_event_service)
):
    try:
        return event_service.get_event(event_id)
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error fetching event")
        raise HTTPException(status_code=500, detail="Failed to fetch event")


@router.post("", response_model=EventOut, status_code=201)
@router.post("/", response_model=EventOut, status_code=201, include_in_schema=False)
async def create_event(
    event_data: EventCreate,
    admin: Dict[str, Any] = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    """Create a new event (admin only)"""
    try:
        return event_service.create_event(event_data)
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error creating event")
        raise HTTPException(status_code=500, detail="Failed to create event")


@router.put("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.update_event(event_id, event_data)
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error updating event")
        raise HTTPException(status_code=500, detail="Failed to update event")


@router.delete("/{event_id}", response_model=Dict[str, Any])
async def delete_event(
    event_id: str,
    admin: Dict[str, Any] = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
):
    try:
        event_service.delete_event(event_id)
        return {"success": True, "message": "Event deleted successfully"}
    except EventlyError:
        raise
    except Exception:
        logger.exception("Error deleting event")
        raise HTTPException(status_code=500, detail="Failed to delete event")
