"""
Seed the database with an admin account and sample site content.

Each collection is only seeded while empty, so running this twice is safe.
Run with `python seed.py` or through POST /api/seed.
"""
import logging
from datetime import datetime

import config
from auth import hash_password
from database import create_document, ensure_indexes, get_db, utcnow
from schemas import AboutContent, Banner, Event, GalleryItem, SiteSettings, TeamMember, Testimonial, User

logger = logging.getLogger(__name__)

SAMPLE_BANNERS = [
    Banner(
        image="/placeholder.svg?height=600&width=1200",
        heading="Welcome to Our School",
        subheading="Providing quality education for a brighter future",
        button_label="Learn More",
        button_link="/about",
        order=1,
    ),
    Banner(
        image="/placeholder.svg?height=600&width=1200",
        heading="Excellence in Education",
        subheading="Nurturing young minds with innovative teaching methods",
        button_label="Explore Programs",
        button_link="/programs",
        order=2,
    ),
]

SAMPLE_EVENTS = [
    Event(
        title="Annual Science Fair",
        description="Students showcase their innovative science projects and experiments.",
        date=datetime(2024, 3, 15),
        location="School Auditorium",
        image="/placeholder.svg?height=200&width=300",
        is_featured=True,
    ),
    Event(
        title="Sports Day Championship",
        description="Inter-house sports competition featuring various athletic events.",
        date=datetime(2024, 3, 22),
        location="School Playground",
        image="/placeholder.svg?height=200&width=300",
    ),
]

SAMPLE_TEAM = [
    TeamMember(
        name="Dr. Sarah Johnson",
        photo="/placeholder.svg?height=300&width=300",
        designation="Principal",
        bio="Over 20 years of experience in educational leadership.",
        email="principal@school.edu",
        phone="(555) 123-4567",
        social_links={"linkedin": "https://linkedin.com/in/sarahjohnson"},
        order=1,
    ),
    TeamMember(
        name="Mr. David Lee",
        photo="/placeholder.svg?height=300&width=300",
        designation="Head of Science",
        order=2,
    ),
]

SAMPLE_TESTIMONIALS = [
    Testimonial(
        name="Emily Carter",
        role="Parent",
        quote="The teachers truly care about every child's progress.",
        rating=5,
        is_featured=True,
    ),
    Testimonial(
        name="Michael Brown",
        role="Alumnus",
        company="Brown & Co.",
        quote="The school gave me the confidence to pursue engineering.",
        rating=4,
    ),
]

SAMPLE_GALLERY = [
    GalleryItem(url="/placeholder.svg?height=400&width=600", alt="Campus entrance", category="campus", order=1),
    GalleryItem(url="/placeholder.svg?height=400&width=600", alt="Science lab", category="facilities", order=2),
]

SAMPLE_ABOUT = AboutContent(
    content="<p>Founded in 1985, our school is committed to academic excellence and character building.</p>",
)

SAMPLE_SETTINGS = SiteSettings(
    site_name="Our School",
    site_description="Providing quality education for a brighter future",
    contact_email="info@school.edu",
    contact_phone="(555) 123-4567",
    address="123 Education Lane, Learning City",
    social_media={"facebook": "", "twitter": "", "instagram": "", "linkedin": ""},
    business_hours={
        "monday": "9:00 AM - 5:00 PM",
        "tuesday": "9:00 AM - 5:00 PM",
        "wednesday": "9:00 AM - 5:00 PM",
        "thursday": "9:00 AM - 5:00 PM",
        "friday": "9:00 AM - 5:00 PM",
        "saturday": "Closed",
        "sunday": "Closed",
    },
    maintenance_mode=False,
    allow_registration=True,
    email_notifications=True,
)

SAMPLES = {
    "banners": SAMPLE_BANNERS,
    "events": SAMPLE_EVENTS,
    "team": SAMPLE_TEAM,
    "testimonials": SAMPLE_TESTIMONIALS,
    "gallery": SAMPLE_GALLERY,
}


def seed_admin(email: str, password: str, name: str = "Admin User") -> bool:
    users = get_db()["users"]
    if users.find_one({"email": email.lower()}):
        logger.info("Admin user %s already exists", email)
        return False
    create_document("users", User(email=email, password=hash_password(password), name=name, role="admin"))
    logger.info("Admin user %s created", email)
    return True


def seed_database() -> dict:
    """Returns the number of documents created per collection."""
    database = get_db()
    ensure_indexes()
    created = {"users": int(seed_admin(config.SEED_ADMIN_EMAIL, config.SEED_ADMIN_PASSWORD))}

    for collection, samples in SAMPLES.items():
        created[collection] = 0
        if database[collection].count_documents({}) > 0:
            continue
        for sample in samples:
            create_document(collection, {**sample.model_dump(by_alias=True), "createdBy": "system"})
        created[collection] = len(samples)
        logger.info("Seeded %d %s", len(samples), collection)

    created["about"] = 0
    if database["about"].count_documents({}) == 0:
        database["about"].insert_one({**SAMPLE_ABOUT.model_dump(by_alias=True), "updatedAt": utcnow(), "updatedBy": "system"})
        created["about"] = 1

    created["settings"] = 0
    if database["settings"].count_documents({"type": "site"}) == 0:
        settings = SAMPLE_SETTINGS.model_dump(by_alias=True, exclude_none=True)
        database["settings"].insert_one({"type": "site", **settings, "updatedAt": utcnow()})
        created["settings"] = 1

    return created


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    print(seed_database())
