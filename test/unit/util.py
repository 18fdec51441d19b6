# SPDX-License-Identifier: Apache-2.0
#
"""In-memory doubles of the session, channel and event interfaces."""
import asyncio
from collections import OrderedDict, namedtuple

import grpc

from txflow.api.channel import ChannelHandle, EventSource, Subscription
from txflow.api.session import ClientSession, SessionProvider
from txflow.fabric.errors import AuthError
from txflow.fabric.transaction.tx_response import ProposalResponse

BroadcastResponse = namedtuple('BroadcastResponse', ['status', 'message'])


def valid_response(payload=b'{}', message='OK'):
    return ProposalResponse(200, message, payload)


class FakeRpcError(grpc.RpcError):

    def __init__(self, code=grpc.StatusCode.UNAVAILABLE,
                 details='failed to connect to all addresses'):
        super().__init__(details)
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


class FakeSubscription(Subscription):

    def __init__(self, source, tx_id):
        self._source = source
        self._tx_id = tx_id
        self.cancel_count = 0

    def cancel(self):
        self.cancel_count += 1
        self._source.subscriptions.pop(self._tx_id, None)


class FakeEventSource(EventSource):
    """Emits a commit event for every transaction the channel orders.

    :param status: status code emitted on commit, None to stay silent
    """

    def __init__(self, name, status='VALID', block_number=7, connected=True,
                 reconnect_error=None):
        self._name = name
        self.status = status
        self.block_number = block_number
        self.connected = connected
        self.reconnect_error = reconnect_error
        self.reconnect_count = 0
        self.subscriptions = {}
        self.issued = []

    @property
    def peer_name(self):
        return self._name

    def subscribe(self, tx_id, on_event, on_error):
        self.subscriptions[tx_id] = (on_event, on_error)
        subscription = FakeSubscription(self, tx_id)
        self.issued.append(subscription)
        return subscription

    def is_connected(self):
        return self.connected

    async def reconnect(self):
        self.reconnect_count += 1
        if self.reconnect_error is not None:
            raise self.reconnect_error

    def emit(self, tx_id, status=None, block_number=None):
        if tx_id in self.subscriptions:
            on_event, _ = self.subscriptions[tx_id]
            on_event(tx_id, status or self.status,
                     block_number or self.block_number)

    def fail(self, tx_id, err):
        if tx_id in self.subscriptions:
            _, on_error = self.subscriptions[tx_id]
            on_error(err)

    def commit(self, tx_id):
        if self.status is not None:
            asyncio.get_event_loop().call_soon(self.emit, tx_id)


class FakeChannel(ChannelHandle):
    """
    :param responses: mapping of peer name to proposal response returned by
     every successful send_proposal, None to return no result
    :param proposal_errors: exceptions raised by successive send_proposal
     calls, None entries let the call through
    """

    def __init__(self, name='mychannel', responses=None, event_sources=(),
                 orderer_status='SUCCESS', orderer_delay=0,
                 proposal_errors=(), query_responses=None, ledger=None):
        self._name = name
        self.responses = responses
        self.event_sources = list(event_sources)
        self.orderer_status = orderer_status
        self.orderer_delay = orderer_delay
        self.proposal_errors = list(proposal_errors)
        self.query_responses = query_responses
        self.ledger = ledger or {}

        self.proposal_calls = 0
        self.proposal_requests = []
        self.query_requests = []
        self.ordering_requests = []
        self.subscribed_when_ordered = {}

    @property
    def name(self):
        return self._name

    async def send_proposal(self, request, timeout):
        self.proposal_calls += 1
        self.proposal_requests.append(request)
        if self.proposal_errors:
            err = self.proposal_errors.pop(0)
            if err is not None:
                raise err
        if self.responses is None:
            return None
        return OrderedDict(self.responses), f'proposal-{request.tx_id}'

    async def send_to_orderer(self, ordering_request, timeout):
        tx_id = ordering_request.tx_id
        self.ordering_requests.append(ordering_request)
        self.subscribed_when_ordered = {
            s.peer_name: tx_id in s.subscriptions for s in self.event_sources}
        if self.orderer_delay:
            await asyncio.sleep(self.orderer_delay)
        if self.orderer_status == 'SUCCESS':
            for source in self.event_sources:
                source.commit(tx_id)
        return BroadcastResponse(self.orderer_status, '')

    async def query_by_chaincode(self, request, timeout):
        self.query_requests.append(request)
        if self.query_responses is None:
            return None
        return OrderedDict(self.query_responses)

    def event_sources_for_org(self):
        return list(self.event_sources)

    async def query_info(self, peer):
        return self.ledger.get('info')

    async def query_instantiated_chaincodes(self, peer):
        return self.ledger.get('chaincodes')

    async def query_block(self, block_number, peer):
        return self.ledger.get('blocks', {}).get(block_number)

    async def query_transaction(self, tx_id, peer):
        return self.ledger.get('transactions', {}).get(tx_id)


class FakeSession(ClientSession):

    def __init__(self, channels=None, identity=b'Org1MSP:user1',
                 peer_channels=None, installed=None):
        self.channels = channels or {}
        self._identity = identity
        self.peer_channels = peer_channels
        self.installed = installed
        self.closed = False

    @property
    def identity(self):
        return self._identity

    def get_channel(self, name):
        return self.channels.get(name)

    async def query_channels(self, peer):
        return self.peer_channels

    async def query_installed_chaincodes(self, peer):
        return self.installed

    def close(self):
        self.closed = True


class FakeSessionProvider(SessionProvider):

    def __init__(self, sessions):
        """
        :param sessions: mapping of (org_name, user_name) to FakeSession
        """
        self.sessions = sessions
        self.calls = []

    async def get_session(self, org_name, user_name):
        self.calls.append((org_name, user_name))
        key = (org_name, user_name)
        if key not in self.sessions:
            raise AuthError(f'User {user_name} was not found in {org_name}')
        return self.sessions[key]
