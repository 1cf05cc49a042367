import json
import unittest
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from luckydraw.broadcast import (
    ParticipantDeleted,
    ParticipantJoined,
    StartSpin,
    WinnerSelected,
)
from luckydraw.models import Base, Campaign, Participant


class SerializationTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()

    def test_campaign_to_json(self):
        created = datetime(2025, 12, 31, 18, 0, tzinfo=timezone.utc)
        with self.Session.begin() as session:
            campaign = Campaign(
                name="Gala",
                category="ONLINE",
                prizes=[{"name": "Bike", "quantity": 1}, {"name": "Phone", "quantity": 2}],
                created_at=created,
            )
            session.add(campaign)
            session.flush()

            d = campaign.to_json()
            self.assertEqual(d["id"], campaign.id)
            self.assertEqual(d["name"], "Gala")
            self.assertEqual(d["type"], "ONLINE")
            self.assertEqual(d["current_prize_index"], 0)
            self.assertEqual(
                d["prizes"],
                [{"name": "Bike", "quantity": 1}, {"name": "Phone", "quantity": 2}],
            )
            self.assertEqual(d["created_at"], "2025-12-31T18:00:00+00:00")
            self.assertNotIn("prizes", campaign.to_json(include_prizes=False))
            # must be JSON serializable as-is
            json.dumps(d)

    def test_participant_to_json(self):
        participant = Participant(campaign_id="c1", name="Alice", contact="0900", id="p1")
        self.assertEqual(
            participant.to_json(),
            {
                "id": "p1",
                "campaign_id": "c1",
                "name": "Alice",
                "contact": "0900",
                "status": "CHECKED_IN",
                "won_prize": None,
            },
        )


class EventPayloadTestCase(unittest.TestCase):
    def test_participant_joined_payload(self):
        participant = Participant(campaign_id="c1", name="Alice", id="p1")
        event = ParticipantJoined.from_participant(participant)
        self.assertEqual(event.event_name, "participant_joined")
        self.assertEqual(
            event.to_payload(),
            {
                "id": "p1",
                "campaign_id": "c1",
                "name": "Alice",
                "contact": None,
                "status": "CHECKED_IN",
            },
        )

    def test_participant_deleted_payload(self):
        event = ParticipantDeleted(id="p1")
        self.assertEqual(event.event_name, "participant_deleted")
        self.assertEqual(event.to_payload(), {"id": "p1"})

    def test_winner_selected_payload(self):
        participant = Participant(campaign_id="c1", name="Bob", contact="b@x", id="p2")
        participant.status = "WON"
        participant.won_prize = "Bike"
        event = WinnerSelected.from_participant(participant)
        self.assertEqual(event.event_name, "winner_selected")
        self.assertEqual(
            event.to_payload(),
            {
                "id": "p2",
                "campaign_id": "c1",
                "name": "Bob",
                "contact": "b@x",
                "status": "WON",
                "won_prize": "Bike",
            },
        )

    def test_winner_selected_requires_win(self):
        participant = Participant(campaign_id="c1", name="Bob", id="p2")
        with self.assertRaises(ValueError):
            WinnerSelected.from_participant(participant)

    def test_start_spin_payload(self):
        event = StartSpin(duration=4000)
        self.assertEqual(event.event_name, "start_spin")
        self.assertEqual(event.to_payload(), {"duration": 4000})


if __name__ == "__main__":
    unittest.main()
