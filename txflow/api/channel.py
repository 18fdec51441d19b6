# SPDX-License-Identifier: Apache-2.0
#
from abc import ABCMeta, abstractmethod


class Subscription(object, metaclass=ABCMeta):
    """ A registration for the commit event of one transaction. """

    @abstractmethod
    def cancel(self):
        """Stop delivering events. Cancelling twice is a no-op."""


class EventSource(object, metaclass=ABCMeta):
    """ The block event stream of one peer. """

    @property
    @abstractmethod
    def peer_name(self):
        """Name or address of the peer emitting the events."""

    @abstractmethod
    def subscribe(self, tx_id, on_event, on_error):
        """Register for the commit event of a transaction.

        :param tx_id: transaction id
        :param on_event: called as on_event(tx_id, status_code, block_number)
        :param on_error: called as on_error(error) when the stream fails
        :return: a Subscription
        """

    @abstractmethod
    def is_connected(self):
        """:return: True while the event stream is connected"""

    @abstractmethod
    async def reconnect(self):
        """Re-establish the event stream, keeping existing subscriptions."""


class ChannelHandle(object, metaclass=ABCMeta):
    """ A channel of the network, as seen from one ClientSession. """

    @property
    @abstractmethod
    def name(self):
        """Name of the channel."""

    @abstractmethod
    async def send_proposal(self, request, timeout):
        """Send a transaction proposal to the request's target peers.

        :param request: TransactionRequest
        :param timeout: time to wait for the peers, in seconds
        :return: (responses, proposal), responses mapping peer name to a
         ProposalResponse or an exception
        """

    @abstractmethod
    async def send_to_orderer(self, ordering_request, timeout):
        """Broadcast an endorsed transaction to the ordering service.

        :param ordering_request: OrderingRequest
        :param timeout: time to wait for the broker, in seconds
        :return: the broker response, with a ``status`` attribute
        """

    @abstractmethod
    async def query_by_chaincode(self, request, timeout):
        """Evaluate a chaincode function without ordering it.

        :param request: TransactionRequest
        :param timeout: time to wait for the peers, in seconds
        :return: responses mapping peer name to payload or exception
        """

    @abstractmethod
    def event_sources_for_org(self):
        """:return: the EventSources of the session organization's peers"""

    @abstractmethod
    async def query_info(self, peer):
        """Query the blockchain info of the channel."""

    @abstractmethod
    async def query_instantiated_chaincodes(self, peer):
        """Query the chaincodes instantiated on the channel."""

    @abstractmethod
    async def query_block(self, block_number, peer):
        """Query a block by its number."""

    @abstractmethod
    async def query_transaction(self, tx_id, peer):
        """Query a transaction by its id."""
