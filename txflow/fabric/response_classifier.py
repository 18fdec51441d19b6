# SPDX-License-Identifier: Apache-2.0

import logging

from txflow.fabric.errors import NoValidResponses
from txflow.fabric.transaction.tx_response import ClassifiedResponses, \
    ErrorDetail
from txflow.util.consts import ERROR_STATUS_THRESHOLD, FAILURE_MARKERS
from txflow.util.utils import decode_payload, describe_error

_logger = logging.getLogger(__name__)


class ResponseClassifier(object):
    """Splits per-peer proposal responses into valid and error buckets.

    A response is an error when it is an exception, carries an error
    status, or its decoded content contains one of the failure markers
    chaincode shims emit for failed executions.
    """

    def __init__(self, failure_markers=FAILURE_MARKERS):
        self._failure_markers = tuple(failure_markers)

    def is_error(self, response):
        """Status 400 and above is an error even without a failure marker."""
        if isinstance(response, Exception):
            return True

        status = getattr(response, 'status', None)
        if isinstance(status, int) and status >= ERROR_STATUS_THRESHOLD:
            return True

        texts = [decode_payload(response),
                 getattr(response, 'message', None) or '']
        return any(marker in text
                   for marker in self._failure_markers for text in texts)

    def classify(self, responses, tx_id=None):
        """Partition the responses.

        :param responses: mapping of peer name to response
        :param tx_id: transaction id, for logging only
        :return: ClassifiedResponses
        :raises NoValidResponses: when no response is valid
        """
        valid = []
        errors = []
        for peer, response in responses.items():
            if self.is_error(response):
                _logger.warning(f'txId: {tx_id}. Received error response from'
                                f' peer {peer}: {response}')
                status, message = describe_error(response)
                if message is None:
                    message = decode_payload(response)
                errors.append(ErrorDetail(peer, status, message))
            else:
                _logger.debug(f'txId: {tx_id}. Valid response from peer'
                              f' {peer}')
                valid.append((peer, response))

        if not valid:
            err = NoValidResponses(errors)
            _logger.error(f'txId: {tx_id}. {err}')
            raise err

        return ClassifiedResponses(tuple(valid), tuple(errors))
