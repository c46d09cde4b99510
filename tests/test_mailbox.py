import asyncio
import unittest

from searchprovider.core.mailbox import InitialSearch, Mailbox, Refresh


class TestMailbox(unittest.IsolatedAsyncioTestCase):
    async def test_messages_are_delivered_in_order(self):
        mailbox = Mailbox("app.desktop")
        await mailbox.send(Refresh())
        await mailbox.send(InitialSearch(["a"]))
        await mailbox.send(InitialSearch(["b"]))

        self.assertIsInstance(await mailbox.receive(), Refresh)
        self.assertEqual((await mailbox.receive()).terms, ["a"])
        self.assertEqual((await mailbox.receive()).terms, ["b"])
        self.assertEqual(mailbox.pending, 0)

    async def test_ninth_send_suspends_until_a_slot_frees(self):
        mailbox = Mailbox("app.desktop", capacity=8)
        for i in range(8):
            await mailbox.send(InitialSearch([str(i)]))

        ninth = asyncio.create_task(mailbox.send(InitialSearch(["8"])))
        await asyncio.sleep(0.01)
        self.assertFalse(ninth.done())
        self.assertEqual(mailbox.pending, 8)

        first = await mailbox.receive()
        await asyncio.wait_for(ninth, timeout=1)
        self.assertEqual(first.terms, ["0"])
        self.assertEqual(mailbox.pending, 8)

        received = [(await mailbox.receive()).terms[0] for _ in range(8)]
        self.assertEqual(received, [str(i) for i in range(1, 9)])

    async def test_request_waits_for_reply(self):
        mailbox = Mailbox("app.desktop")

        async def answer():
            message = await mailbox.receive()
            message.resolve(["p1"])

        responder = asyncio.create_task(answer())
        self.assertEqual(await mailbox.request(InitialSearch([])), ["p1"])
        await responder

    async def test_request_raises_failure(self):
        mailbox = Mailbox("app.desktop")

        async def answer():
            message = await mailbox.receive()
            message.fail(RuntimeError("boom"))

        responder = asyncio.create_task(answer())
        with self.assertRaises(RuntimeError):
            await mailbox.request(Refresh())
        await responder

    def test_capacity_must_be_positive(self):
        with self.assertRaises(ValueError):
            Mailbox("app.desktop", capacity=0)


if __name__ == "__main__":
    unittest.main()
