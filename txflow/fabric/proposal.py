# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging

import grpc

from txflow.fabric.errors import ProposalSendError, ProposalUnavailable
from txflow.fabric.transaction.tx_response import ProposalResult
from txflow.util.consts import DEFAULT_PROPOSAL_TIMEOUT

_logger = logging.getLogger(__name__)


class ProposalSubmitter(object):
    """Sends endorsement proposals to the target peers of a request."""

    def __init__(self, channel, timeout=DEFAULT_PROPOSAL_TIMEOUT, retries=1):
        """
        :param channel: ChannelHandle the proposals go through
        :param timeout: time to wait for the peers, in seconds
        :param retries: number of times a failed send is repeated
        """
        self._channel = channel
        self._timeout = timeout
        self._retries = retries

    async def send(self, request):
        """Send the proposal once.

        :param request: TransactionRequest
        :return: ProposalResult or None if the channel returned nothing
        :raises ProposalSendError: on any transport or serialization failure
        """
        try:
            results = await asyncio.wait_for(
                self._channel.send_proposal(request, self._timeout),
                timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise ProposalSendError(
                f'Timed out after {self._timeout}s sending the proposal'
                f' for txId {request.tx_id}') from e
        except grpc.RpcError as e:
            raise ProposalSendError(
                f'Transport failure sending the proposal for txId'
                f' {request.tx_id}: {e}') from e
        except (TypeError, ValueError) as e:
            raise ProposalSendError(
                f'Unable to build the proposal for txId {request.tx_id}:'
                f' {e}') from e
        except Exception as e:
            raise ProposalSendError(
                f'Failed to send the proposal for txId {request.tx_id}:'
                f' {e}') from e

        if not results:
            return None
        responses, proposal = results
        return ProposalResult(responses, proposal)

    async def submit(self, request):
        """Send the proposal, retrying on transport failure.

        A result made only of peer errors is returned as is, classifying
        it is left to the caller.

        :param request: TransactionRequest
        :return: ProposalResult with at least one response
        :raises ProposalUnavailable: when no result could be obtained
        """
        attempt = 0
        while True:
            try:
                result = await self.send(request)
                break
            except ProposalSendError as e:
                _logger.error(f'txId: {request.tx_id}. Got error while sending'
                              f' transaction proposal: {e}')
                if attempt >= self._retries:
                    raise ProposalUnavailable(
                        f'Unable to obtain transaction proposal for txId:'
                        f' {request.tx_id}. {e}') from e
                attempt += 1
                _logger.error(f'txId: {request.tx_id}. Retrying one more time'
                              f' before throwing an error')

        if result is None:
            raise ProposalUnavailable(
                f'Unable to obtain transaction proposal for txId:'
                f' {request.tx_id}')
        if not result.responses:
            raise ProposalUnavailable(
                f'No results were returned from the proposal request for'
                f' txId: {request.tx_id}')

        _logger.info(f'txId: {request.tx_id}. Successfully sent proposal and'
                     f' received {len(result.responses)} proposal responses')
        return result
