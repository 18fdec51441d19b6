# SPDX-License-Identifier: Apache-2.0
#
import asyncio
import unittest

from test.unit.util import FakeEventSource
from txflow.fabric.channel.commit_watcher import REGISTERED, CommitWatcher
from txflow.fabric.transaction.tx_response import COMMITTED, \
    CONNECTION_FAILED, INVALID, TIMED_OUT

TX_ID = 'c2f7a1'


class EagerEventSource(FakeEventSource):
    """Delivers the event while the subscription is being made."""

    def subscribe(self, tx_id, on_event, on_error):
        subscription = super().subscribe(tx_id, on_event, on_error)
        self.emit(tx_id)
        return subscription


class SlowReconnectEventSource(FakeEventSource):
    """Takes longer to reconnect than the watcher is willing to wait."""

    reconnect_cancelled = False

    async def reconnect(self):
        self.reconnect_count += 1
        try:
            await asyncio.sleep(1)
        except asyncio.CancelledError:
            self.reconnect_cancelled = True
            raise


class CommitWatcherTest(unittest.TestCase):

    def setUp(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def tearDown(self):
        self.loop.close()

    def _watch(self, source, trigger=None, **kwargs):
        watcher = CommitWatcher(source, TX_ID, **kwargs)

        async def run():
            watcher.register()
            if trigger is not None:
                self.loop.call_soon(trigger)
            return await watcher.wait()

        return watcher, self.loop.run_until_complete(run())

    def test_committed(self):
        source = FakeEventSource('peer0.org1', block_number=12)
        watcher, outcome = self._watch(source, lambda: source.emit(TX_ID))

        self.assertEqual(outcome.state, COMMITTED)
        self.assertEqual(outcome.peer, 'peer0.org1')
        self.assertEqual(outcome.block_number, 12)
        self.assertTrue(outcome.is_committed)
        self.assertEqual(watcher.state, COMMITTED)

    def test_invalid(self):
        source = FakeEventSource('peer0.org1')
        _, outcome = self._watch(
            source, lambda: source.emit(TX_ID, 'MVCC_READ_CONFLICT'))

        self.assertEqual(outcome.state, INVALID)
        self.assertEqual(outcome.status_code, 'MVCC_READ_CONFLICT')
        self.assertIn('code: MVCC_READ_CONFLICT', outcome.reason)

    def test_other_transactions_ignored(self):
        source = FakeEventSource('peer0.org1')

        def trigger():
            source.subscriptions[TX_ID][0]('other-tx', 'VALID', 3)
            self.loop.call_soon(source.emit, TX_ID,
                                'ENDORSEMENT_POLICY_FAILURE')

        _, outcome = self._watch(source, trigger)
        self.assertEqual(outcome.state, INVALID)

    def test_timed_out(self):
        source = FakeEventSource('peer0.org1', status=None)
        watcher, outcome = self._watch(source, timeout=0.05)

        self.assertEqual(outcome.state, TIMED_OUT)
        self.assertEqual(outcome.reason, 'REQUEST_TIMEOUT: peer0.org1')
        self.assertEqual(source.subscriptions, {})

    def test_disconnected_fails_immediately(self):
        source = FakeEventSource('peer0.org1', connected=False)
        _, outcome = self._watch(
            source, lambda: source.fail(TX_ID, Exception('stream closed')))

        self.assertEqual(outcome.state, CONNECTION_FAILED)
        self.assertIn('stream closed', outcome.reason)
        self.assertEqual(source.reconnect_count, 0)

    def test_reconnect(self):
        source = FakeEventSource('peer0.org1')

        def trigger():
            source.fail(TX_ID, Exception('transient'))
            self.loop.call_later(0.01, source.emit, TX_ID)

        watcher, outcome = self._watch(source, trigger)

        self.assertEqual(outcome.state, COMMITTED)
        self.assertEqual(source.reconnect_count, 1)
        self.assertEqual(watcher.retries_left, 9)

    def test_retries_exhausted(self):
        source = FakeEventSource('peer0.org1',
                                 reconnect_error=Exception('refused'))
        watcher, outcome = self._watch(
            source, lambda: source.fail(TX_ID, Exception('transient')),
            max_retries=2)

        self.assertEqual(outcome.state, CONNECTION_FAILED)
        self.assertIn('reached max number of retries', outcome.reason)
        self.assertEqual(source.reconnect_count, 2)
        self.assertEqual(watcher.retries_left, 0)

    def test_timer_fires_during_reconnect(self):
        source = SlowReconnectEventSource('peer0.org1')
        watcher = CommitWatcher(source, TX_ID, timeout=0.05)

        async def run():
            watcher.register()
            self.loop.call_soon(source.fail, TX_ID, Exception('transient'))
            outcome = await watcher.wait()
            # let the cancelled reconnect unwind
            await asyncio.sleep(0)
            return outcome

        outcome = self.loop.run_until_complete(run())

        self.assertEqual(outcome.state, TIMED_OUT)
        self.assertEqual(outcome.reason, 'REQUEST_TIMEOUT: peer0.org1')
        self.assertEqual(source.reconnect_count, 1)
        self.assertEqual(watcher.retries_left, 9)
        self.assertTrue(source.reconnect_cancelled)
        self.assertEqual(source.subscriptions, {})
        self.assertEqual(source.issued[0].cancel_count, 1)

    def test_release_is_idempotent(self):
        source = FakeEventSource('peer0.org1')
        watcher, outcome = self._watch(source, lambda: source.emit(TX_ID))

        watcher.close()
        watcher.close()
        self.assertEqual(outcome.state, COMMITTED)
        self.assertEqual(len(source.issued), 1)
        self.assertEqual(source.issued[0].cancel_count, 1)

    def test_event_during_subscribe(self):
        source = EagerEventSource('peer0.org1')
        watcher, outcome = self._watch(source)

        self.assertEqual(outcome.state, COMMITTED)
        self.assertEqual(source.issued[0].cancel_count, 1)
        self.assertEqual(source.subscriptions, {})

    def test_register_twice(self):
        source = FakeEventSource('peer0.org1')
        watcher = CommitWatcher(source, TX_ID, timeout=0.05)

        async def run():
            watcher.register()
            self.assertEqual(watcher.state, REGISTERED)
            with self.assertRaises(Exception):
                watcher.register()
            watcher.close()

        self.loop.run_until_complete(run())
        self.assertTrue(watcher.registered)


if __name__ == '__main__':
    unittest.main()
