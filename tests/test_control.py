import unittest

from luckydraw.broadcast import SessionBroadcaster
from luckydraw.control import ControlRouter


class RecordingConnection:
    def __init__(self):
        self.received: list[tuple[str, dict]] = []

    async def send(self, event_name: str, payload: dict) -> None:
        self.received.append((event_name, payload))


class ControlRouterTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.broadcaster = SessionBroadcaster()
        self.router = ControlRouter(self.broadcaster, spin_duration_ms=3000)
        self.admin = RecordingConnection()
        self.screen = RecordingConnection()

    async def test_join_and_leave(self):
        reply = await self.router.handle(
            self.screen, {"type": "join_campaign", "campaign_id": "c1"}
        )
        self.assertEqual(reply, {"type": "joined", "campaign_id": "c1"})
        self.assertIn(self.screen, self.broadcaster.members("c1"))

        reply = await self.router.handle(
            self.screen, {"type": "leave_campaign", "campaign_id": "c1"}
        )
        self.assertEqual(reply, {"type": "left", "campaign_id": "c1"})
        self.assertEqual(self.broadcaster.members("c1"), frozenset())

    async def test_trigger_spin_reaches_whole_room(self):
        for conn in (self.admin, self.screen):
            await self.router.handle(conn, {"type": "join_campaign", "campaign_id": "c1"})

        reply = await self.router.handle(
            self.admin, {"type": "trigger_spin", "campaign_id": "c1", "duration": 5000}
        )

        self.assertIsNone(reply)
        for conn in (self.admin, self.screen):
            self.assertEqual(conn.received, [("start_spin", {"duration": 5000})])

    async def test_trigger_spin_uses_default_duration(self):
        await self.router.handle(self.screen, {"type": "join_campaign", "campaign_id": "c1"})
        await self.router.handle(self.admin, {"type": "trigger_spin", "campaign_id": "c1"})
        self.assertEqual(self.screen.received, [("start_spin", {"duration": 3000})])

    async def test_trigger_spin_rejects_bad_duration(self):
        await self.router.handle(self.screen, {"type": "join_campaign", "campaign_id": "c1"})
        for duration in (-1, "fast", True, 1.5):
            reply = await self.router.handle(
                self.admin,
                {"type": "trigger_spin", "campaign_id": "c1", "duration": duration},
            )
            self.assertEqual(reply["type"], "error")
        self.assertEqual(self.screen.received, [])

    async def test_malformed_messages_get_error_reply(self):
        for message in (
            ["join_campaign"],
            {"campaign_id": "c1"},
            {"type": "select_winner", "campaign_id": "c1"},
            {"type": "join_campaign"},
            {"type": "join_campaign", "campaign_id": "   "},
        ):
            reply = await self.router.handle(self.screen, message)
            self.assertEqual(reply["type"], "error", message)
        self.assertEqual(self.broadcaster.room_count(), 0)

    async def test_disconnect_leaves_every_room(self):
        await self.router.handle(self.screen, {"type": "join_campaign", "campaign_id": "c1"})
        await self.router.handle(self.screen, {"type": "join_campaign", "campaign_id": "c2"})

        self.router.disconnect(self.screen)

        self.assertEqual(self.broadcaster.room_count(), 0)


if __name__ == "__main__":
    unittest.main()
