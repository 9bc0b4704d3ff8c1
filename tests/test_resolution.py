import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from peewee import SqliteDatabase

from filerelay.core.consts import Texts
from filerelay.core.enums import Resolution
from filerelay.handlers import RelayBot
from filerelay.services.batches import BatchSessionStore
from filerelay.services.gate import SubscriptionGate
from filerelay.services.links import LinkCodec
from filerelay.services.registration import FileRegistrationService
from filerelay.services.resolution import LinkResolutionService, find_records, parse_message_id
from filerelay.store.models import FileRecord, UserAccount, db_proxy

SEND_METHODS = {"send_document", "send_photo", "send_video", "send_audio"}


class TestLinkResolution(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.test_db = SqliteDatabase(":memory:")
        db_proxy.initialize(self.test_db)
        db_proxy.create_tables([UserAccount, FileRecord])

        self.client = AsyncMock()
        self.codec = LinkCodec("relaybot")
        self.service = LinkResolutionService(self.client, self.codec)

        self.alice = UserAccount.create(user_id=1)
        self.bob = UserAccount.create(user_id=2)

    def tearDown(self):
        self.test_db.close()

    def add_file(self, account, archive_id, file_type="document", batch_id=None, file_id=None):
        return FileRecord.create(
            account=account,
            file_name=f"file-{archive_id}",
            file_size="1 KB",
            provider_file_id=file_id or f"tg-{archive_id}",
            archive_message_id=archive_id,
            batch_id=batch_id,
            link=self.codec.encode(batch_id or archive_id),
            file_type=file_type,
        )

    def sent_media(self):
        """Envíos de archivos en el orden en que ocurrieron: (método, file_id)."""
        return [
            (name, args[1]) for name, args, _ in self.client.mock_calls if name in SEND_METHODS
        ]

    def snapshot(self):
        return [
            (r.id, r.batch_id, r.link) for r in FileRecord.select().order_by(FileRecord.id)
        ]

    async def test_empty_token_sends_welcome(self):
        resolution = await self.service.resolve(20, "")

        self.assertEqual(resolution, Resolution.WELCOME)
        self.assertEqual(self.client.send_message.call_args.args, (20, Texts.WELCOME))
        self.assertEqual(self.sent_media(), [])

    async def test_welcome_with_photo(self):
        service = LinkResolutionService(self.client, self.codec, "https://example.com/w.png")

        await service.resolve(20, None)

        self.client.send_photo.assert_awaited_once()
        self.assertEqual(
            self.client.send_photo.call_args.args, (20, "https://example.com/w.png")
        )
        self.assertEqual(self.client.send_photo.call_args.kwargs["caption"], Texts.WELCOME)

    async def test_single_file(self):
        self.add_file(self.alice, 501, "video")

        resolution = await self.service.resolve(20, "501")

        self.assertEqual(resolution, Resolution.SINGLE)
        self.assertEqual(self.sent_media(), [("send_video", "tg-501")])

    async def test_batch_replays_every_record_in_order(self):
        self.add_file(self.alice, 10, "document", batch_id="batch-1-1")
        self.add_file(self.alice, 11, "photo")
        self.add_file(self.alice, 12, "photo", batch_id="batch-1-1")
        self.add_file(self.alice, 13, "audio", batch_id="batch-1-1")

        resolution = await self.service.resolve(20, "batch-1-1")

        self.assertEqual(resolution, Resolution.BATCH)
        self.assertEqual(
            self.sent_media(),
            [("send_document", "tg-10"), ("send_photo", "tg-12"), ("send_audio", "tg-13")],
        )

    async def test_batch_spanning_accounts(self):
        self.add_file(self.bob, 21, batch_id="batch-x")
        self.add_file(self.alice, 20, batch_id="batch-x")

        _, records = find_records("batch-x")

        # Primero la cuenta más antigua, luego el orden de guardado.
        self.assertEqual([r.archive_message_id for r in records], [20, 21])

    async def test_batch_wins_over_message_id(self):
        """Un batch_id que coincide con un message_id se resuelve como lote."""
        self.add_file(self.alice, 42, "document", file_id="single")
        self.add_file(self.bob, 77, "audio", batch_id="42", file_id="batched")

        resolution = await self.service.resolve(20, "42")

        self.assertEqual(resolution, Resolution.BATCH)
        self.assertEqual(self.sent_media(), [("send_audio", "batched")])

    async def test_unknown_token(self):
        self.add_file(self.alice, 501)
        before = self.snapshot()

        for token in ["999", "batch-nope", "-5", "\u00b2", "9" * 30, "9223372036854775808"]:
            resolution = await self.service.resolve(20, token)
            self.assertEqual(resolution, Resolution.NOT_FOUND, token)
            self.assertEqual(self.client.send_message.call_args.args, (20, Texts.FILE_NOT_FOUND))

        self.assertEqual(self.sent_media(), [])
        self.assertEqual(self.snapshot(), before)
        self.assertEqual(UserAccount.select().count(), 2)

    async def test_unknown_file_type_sends_notice(self):
        self.add_file(self.alice, 501, "sticker")

        resolution = await self.service.resolve(20, "501")

        self.assertEqual(resolution, Resolution.SINGLE)
        self.assertEqual(self.sent_media(), [])
        self.assertEqual(self.client.send_message.call_args.args, (20, Texts.FILE_TYPE_UNKNOWN))

    async def test_failed_send_does_not_stop_batch(self):
        self.add_file(self.alice, 1, "document", batch_id="b")
        self.add_file(self.alice, 2, "document", batch_id="b")
        self.client.send_document.side_effect = [ConnectionError("timeout"), None]

        await self.service.resolve(20, "b")

        self.assertEqual(self.client.send_document.await_count, 2)

    async def test_resolution_is_read_only(self):
        self.add_file(self.alice, 5, batch_id="batch-ro")
        before = self.snapshot()

        await self.service.resolve(20, "batch-ro")
        await self.service.resolve(20, "5")

        self.assertEqual(self.snapshot(), before)


class TestParseMessageId(unittest.TestCase):
    def test_ascii_integers(self):
        self.assertEqual(parse_message_id("501"), 501)
        self.assertEqual(parse_message_id("-5"), -5)
        self.assertEqual(parse_message_id("9223372036854775807"), 2**63 - 1)

    def test_rejects_non_ascii_digits_and_overflow(self):
        for token in ["\u00b2", "\u0663", "9" * 20, "9223372036854775808", "1.5", " 7", "-"]:
            self.assertIsNone(parse_message_id(token), token)


class TestRoundTrip(unittest.IsolatedAsyncioTestCase):
    """Registro por el handler y recuperación por `/start <token>`."""

    def setUp(self):
        self.test_db = SqliteDatabase(":memory:")
        db_proxy.initialize(self.test_db)
        db_proxy.create_tables([UserAccount, FileRecord])

        self.client = AsyncMock()
        self.client.forward_messages.return_value = SimpleNamespace(id=900)
        codec = LinkCodec("relaybot")
        self.bot = RelayBot(
            gate=SubscriptionGate(self.client, None),
            registration=FileRegistrationService(
                self.client, -100999, codec, BatchSessionStore()
            ),
            resolution=LinkResolutionService(self.client, codec),
        )

    def tearDown(self):
        self.test_db.close()

    async def test_single_file_round_trip(self):
        upload = MagicMock()
        upload.id = 3
        upload.chat.id = 10
        upload.from_user.id = 10
        upload.document = SimpleNamespace(file_id="tg-doc", file_name="a.zip", file_size=10)
        upload.photo = upload.video = upload.audio = None

        await self.bot.on_media(self.client, upload)
        reply = self.client.send_message.call_args.args[1]
        link = reply.split(": ", 1)[1]
        token = link.split("?start=", 1)[1]

        request = MagicMock()
        request.chat.id = 20
        request.from_user.id = 20
        request.command = ["start", token]
        await self.bot.on_start(self.client, request)

        self.client.send_document.assert_awaited_once_with(20, "tg-doc")

    async def test_help_command(self):
        request = MagicMock()
        request.chat.id = 20
        request.from_user.id = 20

        await self.bot.on_help(self.client, request)

        self.assertEqual(self.client.send_message.call_args.args, (20, Texts.HELP))


if __name__ == "__main__":
    unittest.main()
