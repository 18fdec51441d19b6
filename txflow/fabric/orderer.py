# SPDX-License-Identifier: Apache-2.0
#
import asyncio
import logging

import grpc

from txflow.fabric.transaction.tx_response import OrderingOutcome
from txflow.util.consts import DEFAULT_ORDERER_TIMEOUT, ORDERER_SUCCESS, \
    ORDERER_TIMEOUT, SUCCESS_STATUS

_logger = logging.getLogger(__name__ + ".orderer")


class OrderingSubmitter(object):
    """Broadcasts endorsed transactions to the ordering service.

    A single attempt is made per transaction; a broker that does not answer
    in time is reported as a rejection with the TIMEOUT status.
    """

    def __init__(self, channel, timeout=DEFAULT_ORDERER_TIMEOUT):
        """
        :param channel: ChannelHandle of the transaction
        :param timeout: time to wait for the broker, in seconds
        """
        self._channel = channel
        self._timeout = timeout

    @property
    def timeout(self):
        return self._timeout

    async def submit(self, ordering_request):
        """Send the transaction to the ordering service

        :param ordering_request: OrderingRequest
        :return: OrderingOutcome
        """
        tx_id = ordering_request.tx_id
        try:
            response = await asyncio.wait_for(
                self._channel.send_to_orderer(ordering_request,
                                              self._timeout),
                timeout=self._timeout)
        except asyncio.TimeoutError:
            _logger.error(f'txId: {tx_id}. No answer from the ordering service'
                          f' after {self._timeout}s')
            return OrderingOutcome.rejected(ORDERER_TIMEOUT)
        except grpc.RpcError as e:
            code = e.code() if callable(getattr(e, 'code', None)) else None
            status = getattr(code, 'name', None) or 'UNKNOWN'
            _logger.error(f'txId: {tx_id}. Ordering service call failed:'
                          f' {status}')
            return OrderingOutcome.rejected(status)

        status = getattr(response, 'status', response)
        if status in (ORDERER_SUCCESS, SUCCESS_STATUS):
            _logger.info(f'txId: {tx_id}. Successfully sent transaction to the'
                         f' ordering service.')
            return OrderingOutcome.accepted(status)

        _logger.info(f'txId: {tx_id}. Failed to order the transaction.'
                     f' Error code: {status}')
        return OrderingOutcome.rejected(status)
