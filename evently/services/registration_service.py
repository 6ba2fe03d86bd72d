import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from evently import config
from evently.database.dynamodb import clean_item, query_all
from evently.exceptions import (
    CapacityExceededError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from evently.schemas.registration import RegistrationOut, RegistrationStatus
from evently.services.event_service import EventService, event_key

logger = logging.getLogger(__name__)

DEFAULT_TICKET_TYPE = "Standard"
VALID_STATUSES = [status.value for status in RegistrationStatus]


def registration_key(event_id: str, email: str) -> Dict[str, str]:
    # One item per (event, normalized email) is the uniqueness constraint
    return {"PK": f"EVENT#{event_id}", "SK": f"REGISTRATION#{email}"}


class RegistrationService:
    def __init__(self, dynamodb_resource, table_name=config.TABLE_NAME):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)
        self.event_service = EventService(dynamodb_resource, table_name)

    def create_registration(
        self,
        event_id: Optional[str],
        attendee_name: Optional[str],
        attendee_email: Optional[str],
        attendee_phone: Optional[str],
        ticket_type: Optional[str] = DEFAULT_TICKET_TYPE,
    ) -> RegistrationOut:
        """
        Register one attendee for an event.

        The duplicate and capacity checks give precise errors; the final write
        re-checks both atomically so concurrent requests cannot overbook or
        double-register the same email.
        """
        required = [event_id, attendee_name, attendee_email, attendee_phone]
        if any(value is None or not str(value).strip() for value in required):
            raise ValidationError(
                "All fields are required: eventId, attendeeName, attendeeEmail, attendeePhone"
            )

        event_id = event_id.strip()
        attendee_name = attendee_name.strip()
        attendee_email = attendee_email.strip().lower()
        attendee_phone = attendee_phone.strip()
        ticket_type = (ticket_type or "").strip() or DEFAULT_TICKET_TYPE

        event = self.event_service.find_event(event_id)
        if event is None:
            raise NotFoundError("Event not found")

        if self._is_already_registered(event_id, attendee_email, attendee_phone):
            raise ConflictError("You are already registered for this event")

        active_count = len(self._active_registration_items(event_id))
        if active_count >= event.maxAttendees:
            raise CapacityExceededError("Event is fully booked")

        registration_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        registration_date = now.date().isoformat()
        created_at = now.isoformat()

        item = {
            **registration_key(event_id, attendee_email),
            "id": registration_id,
            "eventId": event_id,
            "attendeeName": attendee_name,
            "attendeeEmail": attendee_email,
            "attendeePhone": attendee_phone,
            "registrationDate": registration_date,
            "status": RegistrationStatus.CONFIRMED.value,
            "ticketType": ticket_type,
            "createdAt": created_at,
            "updatedAt": created_at,
        }

        # Lookup indexes: by id, by attendee email/phone, and the analytics timeline.
        # createdAt orders registrations made on the same day.
        timeline_sk = (
            f"DATE#{registration_date}#{created_at}#REGISTRATION#{registration_id}"
        )
        item["GSI_RegistrationById_PK"] = f"REGISTRATION#{registration_id}"
        item["GSI_RegistrationById_SK"] = "DETAIL"
        item["GSI_RegistrationsByEmail_PK"] = f"EMAIL#{attendee_email}"
        item["GSI_RegistrationsByEmail_SK"] = timeline_sk
        item["GSI_RegistrationsByPhone_PK"] = f"PHONE#{attendee_phone}"
        item["GSI_RegistrationsByPhone_SK"] = timeline_sk
        item["GSI_RegistrationTimeline_PK"] = "REGISTRATION_TIMELINE"
        item["GSI_RegistrationTimeline_SK"] = timeline_sk

        transact_items = [
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": item,
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
            {
                "Update": {
                    "TableName": self.table.table_name,
                    "Key": event_key(event_id),
                    "UpdateExpression": "ADD currentAttendees :one SET updatedAt = :now",
                    "ConditionExpression": "attribute_exists(PK) AND currentAttendees < maxAttendees",
                    "ExpressionAttributeValues": {":one": 1, ":now": now.isoformat()},
                }
            },
        ]

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            if e.response["Error"]["Code"] != "TransactionCanceledException":
                raise
            reasons = e.response.get("CancellationReasons", [])
            codes = [reason.get("Code") for reason in reasons]
            if len(codes) > 1 and codes[1] == "ConditionalCheckFailed":
                raise CapacityExceededError("Event is fully booked")
            raise ConflictError("You are already registered for this event")

        logger.info(
            "Registered %s for event %s (registration %s)",
            attendee_email,
            event_id,
            registration_id,
        )
        return RegistrationOut(**clean_item(item))

    def update_status(self, registration_id: str, status: Optional[str]) -> RegistrationOut:
        """
        Move a registration to any status.

        Entering "cancelled" decrements the event counter on every call,
        including repeated cancellations of the same registration.
        """
        if status not in VALID_STATUSES:
            raise ValidationError(
                "Invalid status. Must be: confirmed, pending, or cancelled"
            )

        item = self._get_registration_item(registration_id)
        if item is None:
            raise NotFoundError("Registration not found")

        try:
            response = self.table.update_item(
                Key={"PK": item["PK"], "SK": item["SK"]},
                UpdateExpression="SET #status = :status, updatedAt = :now",
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":status": status,
                    ":now": datetime.now(timezone.utc).isoformat(),
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise NotFoundError("Registration not found")
            raise

        updated = clean_item(response["Attributes"])
        logger.info(
            "Registration %s status %s -> %s", registration_id, item["status"], status
        )

        if status == RegistrationStatus.CANCELLED.value:
            self._decrement_attendees(updated["eventId"])

        registration = RegistrationOut(**updated)
        registration.event = self.event_service.find_event(registration.eventId)
        return registration

    def get_user_registrations(
        self, identifier: str, identifier_type: Optional[str] = "email"
    ) -> List[RegistrationOut]:
        """Registrations for an attendee, newest first, with events populated"""
        if identifier_type == "phone":
            index_name = "GSI_RegistrationsByPhone"
            partition = f"PHONE#{identifier.strip()}"
        else:
            index_name = "GSI_RegistrationsByEmail"
            partition = f"EMAIL#{identifier.strip().lower()}"

        items = query_all(
            self.table,
            IndexName=index_name,
            KeyConditionExpression=Key(f"{index_name}_PK").eq(partition),
            ScanIndexForward=False,
        )
        return self._populate([clean_item(item) for item in items])

    def match_registrations(self, email: str) -> List[RegistrationOut]:
        return self.get_user_registrations(email, "email")

    def get_event_registrations(
        self, event_id: str, status: Optional[str] = None
    ) -> List[RegistrationOut]:
        items = query_all(
            self.table,
            KeyConditionExpression=Key("PK").eq(f"EVENT#{event_id}")
            & Key("SK").begins_with("REGISTRATION#"),
        )
        registrations = [clean_item(item) for item in items]
        if status:
            registrations = [r for r in registrations if r["status"] == status]

        registrations.sort(
            key=lambda r: (r["registrationDate"], r.get("createdAt") or ""),
            reverse=True,
        )
        return [RegistrationOut(**r) for r in registrations]

    def get_active_registrations(self) -> List[Dict[str, Any]]:
        """Every registration that is not cancelled, newest first"""
        items = query_all(
            self.table,
            IndexName="GSI_RegistrationTimeline",
            KeyConditionExpression=Key("GSI_RegistrationTimeline_PK").eq(
                "REGISTRATION_TIMELINE"
            ),
            FilterExpression=Attr("status").ne(RegistrationStatus.CANCELLED.value),
            ScanIndexForward=False,
        )
        return [clean_item(item) for item in items]

    def _is_already_registered(self, event_id: str, email: str, phone: str) -> bool:
        # Cancelled registrations still block a second sign-up
        response = self.table.get_item(Key=registration_key(event_id, email))
        if "Item" in response:
            return True

        same_phone = query_all(
            self.table,
            IndexName="GSI_RegistrationsByPhone",
            KeyConditionExpression=Key("GSI_RegistrationsByPhone_PK").eq(
                f"PHONE#{phone}"
            ),
            FilterExpression=Attr("eventId").eq(event_id),
        )
        return len(same_phone) > 0

    def _active_registration_items(self, event_id: str) -> List[Dict[str, Any]]:
        return query_all(
            self.table,
            KeyConditionExpression=Key("PK").eq(f"EVENT#{event_id}")
            & Key("SK").begins_with("REGISTRATION#"),
            FilterExpression=Attr("status").ne(RegistrationStatus.CANCELLED.value),
        )

    def _get_registration_item(self, registration_id: str) -> Optional[Dict[str, Any]]:
        items = query_all(
            self.table,
            IndexName="GSI_RegistrationById",
            KeyConditionExpression=Key("GSI_RegistrationById_PK").eq(
                f"REGISTRATION#{registration_id}"
            ),
        )
        return items[0] if items else None

    def _decrement_attendees(self, event_id: str) -> None:
        try:
            self.table.update_item(
                Key=event_key(event_id),
                UpdateExpression="ADD currentAttendees :dec SET updatedAt = :now",
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeValues={
                    ":dec": -1,
                    ":now": datetime.now(timezone.utc).isoformat(),
                },
            )
        except ClientError as e:
            if e.response["Error"]["Code"] != "ConditionalCheckFailedException":
                raise
            logger.warning(
                "Event %s no longer exists; attendee counter not decremented", event_id
            )

    def _populate(self, registrations: List[Dict[str, Any]]) -> List[RegistrationOut]:
        events = self.event_service.get_events_by_ids(r["eventId"] for r in registrations)
        return [
            RegistrationOut(**r, event=events.get(r["eventId"])) for r in registrations
        ]
