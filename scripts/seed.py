import logging

from evently import config
from evently.database.dynamodb import create_table_if_not_exists, get_db_connection
from evently.exceptions import ConflictError
from evently.schemas.event import EventCreate
from evently.services.event_service import EventService
from evently.services.registration_service import RegistrationService
from evently.services.user_service import UserService

logger = logging.getLogger("seed")

SAMPLE_EVENTS = [
    {
        "title": "Tech Innovation Summit 2024",
        "description": "Industry leaders on AI, blockchain and sustainable tech, with hands-on workshops.",
        "date": "2024-03-15",
        "time": "09:00",
        "location": "San Francisco Convention Center",
        "maxAttendees": 500,
        "price": 299,
        "image": "https://images.pexels.com/photos/2608517/pexels-photo-2608517.jpeg?auto=compress&cs=tinysrgb&w=800",
        "category": "Technology",
        "organizer": "TechVision Inc.",
        "tags": ["AI", "Innovation", "Networking", "Workshop"],
    },
    {
        "title": "Digital Marketing Masterclass",
        "description": "Practical digital marketing strategies and real-world case studies.",
        "date": "2024-03-22",
        "time": "14:00",
        "location": "New York Business Hub",
        "maxAttendees": 200,
        "price": 199,
        "image": "https://images.pexels.com/photos/3184360/pexels-photo-3184360.jpeg?auto=compress&cs=tinysrgb&w=800",
        "category": "Marketing",
        "organizer": "Marketing Pro Academy",
        "tags": ["Digital Marketing", "SEO", "Social Media", "Analytics"],
    },
    {
        "title": "Sustainable Business Conference",
        "description": "Building an eco-friendly, profitable enterprise with green business leaders.",
        "date": "2024-04-05",
        "time": "10:00",
        "location": "Chicago Green Center",
        "maxAttendees": 300,
        "price": 149,
        "image": "https://images.pexels.com/photos/3184396/pexels-photo-3184396.jpeg?auto=compress&cs=tinysrgb&w=800",
        "category": "Business",
        "organizer": "EcoVision Corp",
        "tags": ["Sustainability", "Business", "Green Tech", "Environment"],
    },
    {
        "title": "Data Science Bootcamp",
        "description": "An intensive introduction to data science and machine learning in Python.",
        "date": "2024-04-20",
        "time": "09:00",
        "location": "Boston Tech Campus",
        "maxAttendees": 100,
        "price": 399,
        "image": "https://images.pexels.com/photos/3184291/pexels-photo-3184291.jpeg?auto=compress&cs=tinysrgb&w=800",
        "category": "Technology",
        "organizer": "DataScience Pro",
        "tags": ["Data Science", "Machine Learning", "Analytics", "Python"],
    },
]

SAMPLE_REGISTRATIONS = [
    ("John Smith", "john.smith@example.com", "+1-555-0123", "Standard"),
    ("Sarah Johnson", "sarah.johnson@example.com", "+1-555-0124", "VIP"),
    ("Emily Davis", "emily.davis@example.com", "+1-555-0126", "Standard"),
]


def seed():
    dynamodb = get_db_connection()
    create_table_if_not_exists(config.TABLE_NAME, dynamodb)

    event_service = EventService(dynamodb)
    user_service = UserService(dynamodb)
    registration_service = RegistrationService(dynamodb)

    if event_service.get_all_events():
        logger.info("Events already present, skipping event seeding")
    else:
        for event_data in SAMPLE_EVENTS:
            event_service.create_event(EventCreate(**event_data))
        logger.info("Seeded %d events", len(SAMPLE_EVENTS))

    try:
        user_service.create_admin("Admin User", config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
        logger.info("Created admin user %s", config.ADMIN_EMAIL)
    except ConflictError:
        logger.info("Admin user %s already exists", config.ADMIN_EMAIL)

    events = event_service.get_all_events()
    for i, (name, email, phone, ticket_type) in enumerate(SAMPLE_REGISTRATIONS):
        event = events[i % len(events)]
        try:
            registration_service.create_registration(event.id, name, email, phone, ticket_type)
        except ConflictError:
            logger.info("%s already registered for %s", email, event.title)

    logger.info("Seeding complete")


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    seed()
