import asyncio
import unittest
from types import SimpleNamespace

from filerelay.core.enums import BatchRestartPolicy
from filerelay.services.batches import BatchAlreadyActive, BatchSessionStore
from filerelay.store.models import FileRecord


def fake_record(name: str):
    # BatchSession valida el tipo, pero no hace falta que el registro esté guardado.
    return FileRecord(file_name=name)


class TestBatchSessionStore(unittest.TestCase):
    def setUp(self):
        self.clock = SimpleNamespace(now=1700000000.0)
        self.store = BatchSessionStore(clock=lambda: self.clock.now)

    def test_batch_id_format(self):
        session = self.store.start(7)
        self.assertEqual(session.batch_id, "batch-1700000000000-7")
        self.assertEqual(session.user_id, 7)
        self.assertTrue(session.is_empty)

    def test_file_without_session_is_not_batched(self):
        self.assertFalse(self.store.add(7, fake_record("a.txt")))
        self.assertIsNone(self.store.get(7))

    def test_files_accumulate_in_order(self):
        self.store.start(7)
        for name in ["a", "b", "c"]:
            self.assertTrue(self.store.add(7, fake_record(name)))

        session = self.store.end(7)
        assert session is not None
        self.assertEqual([r.file_name for r in session.files], ["a", "b", "c"])
        self.assertFalse(self.store.is_active(7))

    def test_end_without_session(self):
        self.assertIsNone(self.store.end(7))

    def test_end_empty_session_keeps_it_open(self):
        started = self.store.start(7)
        self.assertIsNone(self.store.end(7))
        self.assertIs(self.store.get(7), started)

    def test_restart_discards_previous_files_by_default(self):
        self.store.start(7)
        self.store.add(7, fake_record("old"))
        self.clock.now += 5
        second = self.store.start(7)
        self.store.add(7, fake_record("new"))

        session = self.store.end(7)
        assert session is not None
        self.assertEqual(session.batch_id, second.batch_id)
        self.assertEqual([r.file_name for r in session.files], ["new"])

    def test_restart_rejected_with_reject_policy(self):
        store = BatchSessionStore(BatchRestartPolicy.REJECT, clock=lambda: 1.0)
        first = store.start(7)
        store.add(7, fake_record("keep"))

        with self.assertRaises(BatchAlreadyActive) as ctx:
            store.start(7)

        self.assertIs(ctx.exception.session, first)
        self.assertEqual([r.file_name for r in store.get(7).files], ["keep"])  # type: ignore

    def test_sessions_are_independent_per_user(self):
        self.store.start(1)
        self.store.start(2)
        self.store.add(1, fake_record("from-1"))

        self.assertIsNone(self.store.end(2))
        session = self.store.end(1)
        assert session is not None
        self.assertEqual(len(session.files), 1)
        self.assertTrue(self.store.is_active(2))

    def test_restore_reopens_session(self):
        self.store.start(7)
        self.store.add(7, fake_record("a"))
        session = self.store.end(7)
        assert session is not None

        self.store.restore(session)
        self.assertIs(self.store.get(7), session)


class TestUserLocks(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = BatchSessionStore()

    async def test_same_user_is_serialized(self):
        order = []

        async def work(name):
            async with self.store.locked(7):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(work("a"), work("b"))

        self.assertEqual(order, ["a-in", "a-out", "b-in", "b-out"])

    async def test_different_users_do_not_wait(self):
        async with self.store.locked(1):
            async with self.store.locked(2):
                self.assertEqual(self.store.pending_locks, 2)

    async def test_lock_is_dropped_when_released(self):
        async with self.store.locked(1):
            self.assertEqual(self.store.pending_locks, 1)
        self.assertEqual(self.store.pending_locks, 0)

        self.store.start(1)
        async with self.store.locked(1):
            pass
        self.assertEqual(self.store.pending_locks, 0)
        self.assertTrue(self.store.is_active(1))


if __name__ == "__main__":
    unittest.main()
