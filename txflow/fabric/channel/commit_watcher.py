# SPDX-License-Identifier: Apache-2.0
#
import asyncio
import logging

from txflow.fabric.transaction.tx_response import CommitOutcome
from txflow.util.consts import DEFAULT_EVENT_MAX_RETRIES, \
    DEFAULT_WAIT_FOR_EVENT_TIMEOUT, TX_VALID

_logger = logging.getLogger(__name__ + ".commit_watcher")

REGISTERED = 'REGISTERED'


class CommitWatcher(object):
    """Waits for the commit event of one transaction on one peer.

    The watcher is registered before the transaction is ordered so the
    commit notification cannot be missed. It then settles on exactly one
    CommitOutcome: committed, invalid, timed out or connection failed.
    """

    def __init__(self, event_source, tx_id,
                 timeout=DEFAULT_WAIT_FOR_EVENT_TIMEOUT,
                 max_retries=DEFAULT_EVENT_MAX_RETRIES):
        self._event_source = event_source
        self._tx_id = tx_id
        self._timeout = timeout
        self._retries_left = max_retries

        self._loop = None
        self._outcome = None
        self._timer = None
        self._timer_fired = False
        self._subscription = None
        self._reconnect_task = None

    @property
    def peer_name(self):
        return self._event_source.peer_name

    @property
    def tx_id(self):
        return self._tx_id

    @property
    def retries_left(self):
        return self._retries_left

    @property
    def state(self):
        if self._outcome is None or not self._outcome.done():
            return REGISTERED
        return self._outcome.result().state

    @property
    def registered(self):
        return self._outcome is not None

    def register(self):
        """Start the timeout timer and subscribe for the commit event.

        Must be called from within the running event loop.
        """
        if self._outcome is not None:
            raise Exception(f'CommitWatcher for txId {self._tx_id} on peer'
                            f' {self.peer_name} is already registered')

        self._loop = asyncio.get_event_loop()
        self._outcome = self._loop.create_future()
        self._timer = self._loop.call_later(self._timeout, self._on_timeout)

        _logger.info(f'txId: {self._tx_id}. Setting up event handler on peer'
                     f' {self.peer_name}')
        self._subscription = self._event_source.subscribe(
            self._tx_id, self._on_event, self._on_error)

        # the source may have answered synchronously
        if self._outcome.done():
            self._cancel_subscription()
        return self

    async def wait(self):
        """Wait for the terminal outcome.

        :return: CommitOutcome
        """
        if self._outcome is None:
            self.register()
        try:
            return await self._outcome
        finally:
            self._release()

    def _on_event(self, tx_id, status_code, block_number):
        if tx_id != self._tx_id:
            return

        _logger.info(f'txId: {self._tx_id}. Transaction has status of'
                     f' {status_code} in block {block_number} on peer'
                     f' {self.peer_name}')
        if status_code == TX_VALID:
            self._settle(CommitOutcome.committed(self.peer_name,
                                                 block_number))
        else:
            self._settle(CommitOutcome.invalid(self.peer_name, status_code,
                                               block_number))

    def _on_error(self, err):
        if self._is_settled():
            return

        if not self._event_source.is_connected():
            _logger.error(f'txId: {self._tx_id}. Event stream of peer'
                          f' {self.peer_name} is disconnected: {err}')
            self._settle(CommitOutcome.connection_failed(self.peer_name,
                                                         err))
            return

        if self._timer_fired or self._retries_left <= 0:
            _logger.error(f'txId: {self._tx_id}. Ran out of time or reached'
                          f' max number of retries for peer {self.peer_name}:'
                          f' {self._retries_left}')
            self._settle(CommitOutcome.connection_failed(
                self.peer_name,
                f'{err} (reached max number of retries)'))
            return

        self._retries_left -= 1
        _logger.debug(f'txId: {self._tx_id}. Retrying event connection to'
                      f' peer {self.peer_name}, {self._retries_left} retries'
                      f' left')
        self._reconnect_task = self._loop.create_task(self._reconnect())

    async def _reconnect(self):
        try:
            await self._event_source.reconnect()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _logger.warning(f'txId: {self._tx_id}. Reconnection to peer'
                            f' {self.peer_name} failed: {e}')
            self._on_error(e)

    def _on_timeout(self):
        self._timer = None
        self._timer_fired = True
        _logger.error(f'txId: {self._tx_id}. REQUEST_TIMEOUT: '
                      f'{self.peer_name}')
        self._settle(CommitOutcome.timed_out(self.peer_name))

    def _is_settled(self):
        return self._outcome is None or self._outcome.done()

    def _settle(self, outcome):
        if self._is_settled():
            return
        self._release()
        self._outcome.set_result(outcome)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_subscription(self):
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _release(self):
        self._cancel_timer()
        self._cancel_subscription()
        task = self._reconnect_task
        if task is not None and not task.done() \
                and task is not asyncio.current_task():
            task.cancel()
        self._reconnect_task = None

    def close(self):
        """Release the timer, the subscription and any pending reconnect."""
        self._release()
