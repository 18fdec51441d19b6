# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging

from txflow.fabric.channel.commit_watcher import CommitWatcher
from txflow.fabric.errors import NoValidResponses, ProposalUnavailable
from txflow.fabric.orderer import OrderingSubmitter
from txflow.fabric.proposal import ProposalSubmitter
from txflow.fabric.response_classifier import ResponseClassifier
from txflow.fabric.transaction.tx_request import OrderingRequest
from txflow.fabric.transaction.tx_response import SubmissionResult
from txflow.util.consts import DEFAULT_EVENT_MAX_RETRIES, \
    DEFAULT_ORDERER_TIMEOUT, DEFAULT_PROPOSAL_TIMEOUT, \
    DEFAULT_WAIT_FOR_EVENT_TIMEOUT

_logger = logging.getLogger(__name__)


class SubmissionCoordinator(object):
    """Drives one transaction from proposal to confirmed commit.

    The coordinator endorses the request, registers a CommitWatcher on each
    event source of the organization, orders the transaction and joins
    every outcome into a single SubmissionResult.
    """

    def __init__(self, channel,
                 proposal_timeout=DEFAULT_PROPOSAL_TIMEOUT,
                 orderer_timeout=DEFAULT_ORDERER_TIMEOUT,
                 event_timeout=DEFAULT_WAIT_FOR_EVENT_TIMEOUT,
                 event_max_retries=DEFAULT_EVENT_MAX_RETRIES,
                 classifier=None):
        self._channel = channel
        self._event_timeout = event_timeout
        self._event_max_retries = event_max_retries
        self._proposal_submitter = ProposalSubmitter(channel,
                                                     proposal_timeout)
        self._ordering_submitter = OrderingSubmitter(channel, orderer_timeout)
        self._classifier = classifier or ResponseClassifier()

    def _event_sources(self):
        sources = []
        seen = set()
        for source in self._channel.event_sources_for_org():
            if source.peer_name in seen:
                continue
            seen.add(source.peer_name)
            sources.append(source)
        return sources

    async def run(self, request):
        """Submit the transaction and wait for its commit.

        :param request: TransactionRequest
        :return: SubmissionResult
        """
        tx_id = request.tx_id
        _logger.info(f'txId: {tx_id}. Invoke transaction request {request}')
        watchers = []
        try:
            result = await self._proposal_submitter.submit(request)
            classified = self._classifier.classify(result.responses, tx_id)

            first = classified.valid[0][1]
            status = getattr(first, 'status', None)
            message = getattr(first, 'message', None)
            _logger.info(f'txId: {tx_id}. Proposal endorsed by'
                         f' {len(classified.valid)} peers, first response:'
                         f' status - {status}, message - "{message}"')

            # watchers must be listening before the orderer sees the tx
            watchers = [CommitWatcher(source, tx_id,
                                      timeout=self._event_timeout,
                                      max_retries=self._event_max_retries)
                        for source in self._event_sources()]
            for watcher in watchers:
                watcher.register()

            ordering_request = OrderingRequest(tx_id, classified.valid,
                                               result.proposal)
            ordering = asyncio.ensure_future(
                self._ordering_submitter.submit(ordering_request))

            outcomes = await asyncio.gather(
                *[w.wait() for w in watchers], ordering,
                return_exceptions=True)
        except (ProposalUnavailable, NoValidResponses) as e:
            _logger.error(f'txId: {tx_id}. Failed to invoke chaincode: {e}')
            return SubmissionResult.failure(tx_id, str(e))
        except Exception as e:
            _logger.exception(f'txId: {tx_id}. Failed to invoke due to'
                              f' error: {e}')
            for watcher in watchers:
                watcher.close()
            return SubmissionResult.failure(tx_id, str(e) or repr(e))

        return self._synthesize(request, watchers, outcomes)

    def _synthesize(self, request, watchers, outcomes):
        tx_id = request.tx_id
        ordering_outcome = outcomes[-1]
        commit_outcomes = outcomes[:-1]

        reason = None
        if isinstance(ordering_outcome, BaseException):
            _logger.error(f'txId: {tx_id}. Ordering submission failed:'
                          f' {ordering_outcome!r}')
            reason = str(ordering_outcome) or repr(ordering_outcome)
        elif not ordering_outcome.is_accepted:
            reason = ordering_outcome.reason

        for watcher, outcome in zip(watchers, commit_outcomes):
            _logger.info(f'txId: {tx_id}. Event results for peer'
                         f' {watcher.peer_name}: {outcome}')
            if isinstance(outcome, BaseException):
                if reason is None:
                    reason = str(outcome) or repr(outcome)
            elif not outcome.is_committed and reason is None:
                reason = outcome.reason

        if reason is not None:
            _logger.error(f'txId: {tx_id}. Failed to invoke chaincode.'
                          f' cause: {reason}')
            return SubmissionResult.failure(tx_id, reason)

        _logger.info(f'txId: {tx_id}. Successfully invoked chaincode'
                     f' {request.cc_name}, function {request.fcn}, on the'
                     f' channel {request.channel_name}')
        return SubmissionResult.success(tx_id)
