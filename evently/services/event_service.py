import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from evently import config
from evently.database.dynamodb import clean_item, query_all, to_dynamodb_number
from evently.exceptions import NotFoundError
from evently.schemas.event import EventCreate, EventOut, EventUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Leading integer of a query value, None when there is none"""
    if value is None or isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def event_key(event_id: str) -> Dict[str, str]:
    return {"PK": f"EVENT#{event_id}", "SK": "DETAIL"}


def event_timeline_sk(date: str, event_id: str) -> str:
    return f"DATE#{date}#EVENT#{event_id}"


class EventService:
    def __init__(self, dynamodb_resource, table_name=config.TABLE_NAME):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)

    def create_event(self, event_data: EventCreate) -> EventOut:
        """Create an event with an empty attendee counter"""
        event_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()

        item = {
            **event_key(event_id),
            "id": event_id,
            "title": event_data.title,
            "description": event_data.description,
            "date": event_data.date,
            "time": event_data.time,
            "location": event_data.location,
            "maxAttendees": event_data.maxAttendees,
            "currentAttendees": 0,
            "price": to_dynamodb_number(float(event_data.price)),
            "image": event_data.image,
            "category": event_data.category,
            "organizer": event_data.organizer,
            "tags": event_data.tags,
            "createdAt": now,
            "updatedAt": now,
        }

        # Timeline index lists events ordered by date
        item["GSI_EventsByDate_PK"] = "EVENT_TIMELINE"
        item["GSI_EventsByDate_SK"] = event_timeline_sk(event_data.date, event_id)

        self.table.put_item(
            Item=item, ConditionExpression="attribute_not_exists(PK)"
        )
        logger.info("Created event %s (%s)", event_id, event_data.title)
        return EventOut(**clean_item(item))

    def get_event(self, event_id: str) -> EventOut:
        item = self._get_event_item(event_id)
        if item is None:
            raise NotFoundError("Event not found")
        return EventOut(**clean_item(item))

    def find_event(self, event_id: str) -> Optional[EventOut]:
        item = self._get_event_item(event_id)
        return EventOut(**clean_item(item)) if item else None

    def get_events_by_ids(self, event_ids: Iterable[str]) -> Dict[str, EventOut]:
        """Load events for populating registrations; missing ids are skipped"""
        events = {}
        for event_id in set(event_ids):
            event = self.find_event(event_id)
            if event is not None:
                events[event_id] = event
        return events

    def get_all_events(self) -> List[EventOut]:
        """All events ordered by date ascending"""
        items = query_all(
            self.table,
            IndexName="GSI_EventsByDate",
            KeyConditionExpression=Key("GSI_EventsByDate_PK").eq("EVENT_TIMELINE"),
            ScanIndexForward=True,
        )
        return [EventOut(**clean_item(item)) for item in items]

    def list_events(
        self,
        limit: Any = DEFAULT_PAGE_SIZE,
        offset: Any = 0,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[EventOut], Dict[str, Any]]:
        """
        Filter and paginate events.
        Returns: (events, pagination)
        """
        limit = min(parse_int(limit) or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        if limit < 1:
            limit = DEFAULT_PAGE_SIZE
        offset = max(parse_int(offset) or 0, 0)

        events = [
            event
            for event in self.get_all_events()
            if self._matches_filters(event, category, search)
        ]

        total = len(events)
        has_more = offset + limit < total
        pagination = {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": has_more,
            "nextOffset": offset + limit if has_more else None,
        }
        return events[offset : offset + limit], pagination

    def get_categories(self) -> List[str]:
        return sorted({event.category for event in self.get_all_events()})

    def update_event(self, event_id: str, event_data: EventUpdate) -> EventOut:
        """Apply the supplied fields only"""
        changes = event_data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return self.get_event(event_id)

        changes["updatedAt"] = datetime.now(timezone.utc).isoformat()
        if "date" in changes:
            changes["GSI_EventsByDate_SK"] = event_timeline_sk(changes["date"], event_id)

        # Every attribute goes through a name placeholder; date, time, location are reserved words
        names = {}
        values = {}
        assignments = []
        for i, (field, value) in enumerate(changes.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = to_dynamodb_number(value)
            assignments.append(f"#f{i} = :v{i}")

        try:
            response = self.table.update_item(
                Key=event_key(event_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise NotFoundError("Event not found")
            raise

        logger.info("Updated event %s: %s", event_id, sorted(changes))
        return EventOut(**clean_item(response["Attributes"]))

    def delete_event(self, event_id: str) -> None:
        try:
            self.table.delete_item(
                Key=event_key(event_id),
                ConditionExpression="attribute_exists(PK)",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise NotFoundError("Event not found")
            raise
        logger.info("Deleted event %s", event_id)

    def _get_event_item(self, event_id: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key=event_key(event_id))
        return response.get("Item")

    def _matches_filters(
        self, event: EventOut, category: Optional[str], search: Optional[str]
    ) -> bool:
        if category and category != "all" and event.category != category:
            return False

        if search:
            needle = search.lower()
            haystack = [event.title, event.description, *event.tags]
            if not any(needle in text.lower() for text in haystack):
                return False

        return True
