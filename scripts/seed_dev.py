from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.models import Base
from luckydraw.registry import ParticipantRegistry
from luckydraw.workflows import create_campaign

SAMPLE_ATTENDEES = [
    ("Alice", "0900000001"),
    ("Bob", "0900000002"),
    ("Carol", None),
    ("Dave", "dave@example.com"),
]


def main() -> None:
    """Seed the development database with one campaign and a few check-ins."""
    engine = make_engine()

    # SQLite refuses to drop tables referenced by enforced foreign keys in
    # the wrong order, so switch the checks off around the reset.
    with engine.connect() as conn:
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        if conn.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        conn.commit()

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    with Session.begin() as session:
        campaign = create_campaign(
            session,
            "Year End Party",
            category="OFFLINE",
            prizes=[
                {"name": "Bike", "quantity": 1},
                {"name": "Phone", "quantity": 2},
                {"name": "Gift card", "quantity": 5},
            ],
        )
        campaign_id = campaign.id

    registry = ParticipantRegistry(Session)
    for name, contact in SAMPLE_ATTENDEES:
        registry.create_participant(campaign_id, name, contact)

    print(f"Seeded campaign {campaign_id} with {len(SAMPLE_ATTENDEES)} participants.")


if __name__ == "__main__":
    main()
