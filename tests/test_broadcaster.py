import unittest

from luckydraw.broadcast import ParticipantDeleted, SessionBroadcaster, StartSpin


class RecordingConnection:
    def __init__(self, name: str = "conn"):
        self.name = name
        self.received: list[tuple[str, dict]] = []

    async def send(self, event_name: str, payload: dict) -> None:
        self.received.append((event_name, payload))


class BrokenConnection:
    def __init__(self):
        self.attempts = 0

    async def send(self, event_name: str, payload: dict) -> None:
        self.attempts += 1
        raise ConnectionResetError("socket closed")


class SessionBroadcasterTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.broadcaster = SessionBroadcaster()

    async def test_publish_reaches_every_member(self) -> None:
        first, second = RecordingConnection("a"), RecordingConnection("b")
        self.broadcaster.join(first, "camp-a")
        self.broadcaster.join(second, "camp-a")

        delivered = await self.broadcaster.publish("camp-a", ParticipantDeleted(id="p1"))

        self.assertEqual(delivered, 2)
        for conn in (first, second):
            self.assertEqual(conn.received, [("participant_deleted", {"id": "p1"})])

    async def test_join_is_idempotent(self) -> None:
        conn = RecordingConnection()
        self.broadcaster.join(conn, "camp-a")
        self.broadcaster.join(conn, "camp-a")
        self.assertEqual(len(self.broadcaster.members("camp-a")), 1)

        await self.broadcaster.publish("camp-a", StartSpin(duration=10))
        self.assertEqual(len(conn.received), 1)

    async def test_rooms_are_isolated(self) -> None:
        in_a, in_b = RecordingConnection("a"), RecordingConnection("b")
        self.broadcaster.join(in_a, "camp-a")
        self.broadcaster.join(in_b, "camp-b")

        await self.broadcaster.publish("camp-b", ParticipantDeleted(id="p9"))

        self.assertEqual(in_a.received, [])
        self.assertEqual(in_b.received, [("participant_deleted", {"id": "p9"})])

    async def test_late_joiner_gets_no_replay(self) -> None:
        await self.broadcaster.publish("camp-a", ParticipantDeleted(id="p1"))
        late = RecordingConnection()
        self.broadcaster.join(late, "camp-a")
        self.assertEqual(late.received, [])

    async def test_leave_without_campaign_leaves_every_room(self) -> None:
        conn = RecordingConnection()
        self.broadcaster.join(conn, "camp-a")
        self.broadcaster.join(conn, "camp-b")
        self.assertEqual(self.broadcaster.room_count(), 2)

        self.broadcaster.leave(conn)

        self.assertEqual(self.broadcaster.room_count(), 0)
        await self.broadcaster.publish("camp-a", StartSpin(duration=1))
        self.assertEqual(conn.received, [])

    async def test_leave_single_room(self) -> None:
        conn = RecordingConnection()
        self.broadcaster.join(conn, "camp-a")
        self.broadcaster.join(conn, "camp-b")

        self.broadcaster.leave(conn, "camp-a")
        # leaving a room twice, or one never joined, is harmless
        self.broadcaster.leave(conn, "camp-a")
        self.broadcaster.leave(conn, "camp-z")

        self.assertEqual(self.broadcaster.members("camp-a"), frozenset())
        self.assertIn(conn, self.broadcaster.members("camp-b"))

    async def test_failed_send_drops_connection_only(self) -> None:
        healthy, broken = RecordingConnection(), BrokenConnection()
        self.broadcaster.join(healthy, "camp-a")
        self.broadcaster.join(broken, "camp-a")
        self.broadcaster.join(broken, "camp-b")

        with self.assertLogs("luckydraw.broadcast.broadcaster", level="WARNING"):
            delivered = await self.broadcaster.publish("camp-a", StartSpin(duration=5))

        self.assertEqual(delivered, 1)
        self.assertEqual(healthy.received, [("start_spin", {"duration": 5})])
        self.assertNotIn(broken, self.broadcaster.members("camp-a"))
        self.assertNotIn(broken, self.broadcaster.members("camp-b"))

    async def test_publish_to_empty_room(self) -> None:
        delivered = await self.broadcaster.publish("nobody", StartSpin(duration=5))
        self.assertEqual(delivered, 0)


if __name__ == "__main__":
    unittest.main()
