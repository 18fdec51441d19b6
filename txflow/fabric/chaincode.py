# SPDX-License-Identifier: Apache-2.0

import asyncio
import json
import logging

from txflow.fabric.coordinator import SubmissionCoordinator
from txflow.fabric.errors import QueryError
from txflow.fabric.response_classifier import ResponseClassifier
from txflow.fabric.transaction.tx_request import create_tx_request
from txflow.util.consts import DEFAULT_EVENT_MAX_RETRIES, \
    DEFAULT_ORDERER_TIMEOUT, DEFAULT_PROPOSAL_TIMEOUT, \
    DEFAULT_WAIT_FOR_EVENT_TIMEOUT, HISTORY_QUERY_FCN, RECORD_KEY
from txflow.util.utils import decode_payload, encode_args

_logger = logging.getLogger(__name__)


def unwrap_query_result(fcn, result):
    """Shape a decoded query payload into the list handed to callers.

    History queries keep every entry whole since they carry the
    transaction ids; other list results are stripped down to the value
    stored under each entry's ``Record`` key.

    :param fcn: the chaincode function that was queried
    :param result: the decoded JSON payload
    :return: list
    """
    if not isinstance(result, list):
        return [result]

    if fcn == HISTORY_QUERY_FCN:
        return [result]

    ret = []
    for entry in result:
        if isinstance(entry, dict) and entry.get(RECORD_KEY):
            ret.append(entry[RECORD_KEY])
        else:
            ret.append(entry)
    return ret


class Chaincode(object):
    """A chaincode deployed on a channel, invoked and queried by name."""

    def __init__(self, cc_name, proposal_timeout=DEFAULT_PROPOSAL_TIMEOUT,
                 orderer_timeout=DEFAULT_ORDERER_TIMEOUT,
                 event_timeout=DEFAULT_WAIT_FOR_EVENT_TIMEOUT,
                 event_max_retries=DEFAULT_EVENT_MAX_RETRIES):
        self._name = cc_name
        self._proposal_timeout = proposal_timeout
        self._orderer_timeout = orderer_timeout
        self._event_timeout = event_timeout
        self._event_max_retries = event_max_retries
        self._classifier = ResponseClassifier()

    @property
    def name(self):
        return self._name

    async def invoke(self, channel, peers, args, fcn='invoke', creator=b''):
        """
        Invoke chaincode for ledger update

        :param channel: ChannelHandle to submit through
        :param peers: names of the endorsing peers
        :param args: function arguments, sent as one JSON document
        :param fcn: chaincode function
        :param creator: identity of the submitter
        :return: SubmissionResult
        """
        request = create_tx_request(peers, self._name, fcn,
                                    encode_args(args), channel.name, creator)

        coordinator = SubmissionCoordinator(
            channel,
            proposal_timeout=self._proposal_timeout,
            orderer_timeout=self._orderer_timeout,
            event_timeout=self._event_timeout,
            event_max_retries=self._event_max_retries,
            classifier=self._classifier)
        return await coordinator.run(request)

    async def query(self, channel, peers, args, fcn='query', creator=b''):
        """
        Query chaincode

        Only the first valid peer response is used.

        :param channel: ChannelHandle to query through
        :param peers: names of the peers to query
        :param args: function arguments, sent as one JSON document
        :param fcn: chaincode function
        :param creator: identity of the submitter
        :return: list of decoded results
        """
        request = create_tx_request(peers, self._name, fcn,
                                    encode_args(args), channel.name, creator)
        _logger.info(f'queryChaincode - fcn: {fcn}. Query request {request}')

        try:
            responses = await asyncio.wait_for(
                channel.query_by_chaincode(request, self._proposal_timeout),
                timeout=self._proposal_timeout)
        except asyncio.TimeoutError as e:
            raise QueryError(f'Query for fcn: {fcn} timed out after'
                             f' {self._proposal_timeout}s') from e

        if not responses:
            raise QueryError(f'Unable to query chaincode for fcn: {fcn}.'
                             f' No responses returned from peers')

        for peer, response in responses.items():
            _logger.info(f'Query result from peer [{peer}]:'
                         f' {decode_payload(response)}')

        classified = self._classifier.classify(responses, request.tx_id)
        payload = decode_payload(classified.valid[0][1])
        try:
            result = json.loads(payload)
        except ValueError as e:
            raise QueryError(f'Query for fcn: {fcn} returned a payload that'
                             f' is not JSON: {payload!r}') from e

        _logger.info(f'queryChaincode - fcn: {fcn}. Valid response as JSON'
                     f' {result}')
        return unwrap_query_result(fcn, result)
