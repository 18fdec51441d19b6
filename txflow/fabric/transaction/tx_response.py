# SPDX-License-Identifier: Apache-2.0

from collections import OrderedDict, namedtuple

from txflow.fabric.errors import CommitConnectionFailed, CommitInvalid, \
    CommitTimedOut, OrderingRejected, SubmissionFailed
from txflow.util.consts import TX_VALID

COMMITTED = 'COMMITTED'
INVALID = 'INVALID'
TIMED_OUT = 'TIMED_OUT'
CONNECTION_FAILED = 'CONNECTION_FAILED'

SUCCESS = 'SUCCESS'
FAILURE = 'FAILURE'


ProposalResponse = namedtuple('ProposalResponse',
                              ['status', 'message', 'payload'])


class ErrorDetail(namedtuple('ErrorDetail', ['peer', 'status', 'message'])):
    __slots__ = ()

    def __str__(self):
        return f'peer={self.peer}, status={self.status}, ' \
               f'message={self.message}'


class ProposalResult(namedtuple('ProposalResult', ['responses', 'proposal'])):
    """Per-peer proposal responses and the proposal they endorse.

    ``responses`` maps peer name to a ProposalResponse or an exception.
    """
    __slots__ = ()

    def __new__(cls, responses, proposal):
        return super().__new__(cls, OrderedDict(responses), proposal)


ClassifiedResponses = namedtuple('ClassifiedResponses', ['valid', 'errors'])


class CommitOutcome(namedtuple('CommitOutcome', ['state', 'peer',
                                                 'block_number',
                                                 'status_code', 'reason'])):
    """Terminal result of watching one peer for a transaction commit."""
    __slots__ = ()

    @classmethod
    def committed(cls, peer, block_number):
        return cls(COMMITTED, peer, block_number, TX_VALID, None)

    @classmethod
    def invalid(cls, peer, status_code, block_number=None):
        return cls(INVALID, peer, block_number, status_code,
                   f'The invoke chaincode transaction was invalid on peer'
                   f' {peer}, code: {status_code}')

    @classmethod
    def timed_out(cls, peer):
        return cls(TIMED_OUT, peer, None, None,
                   f'REQUEST_TIMEOUT: {peer}')

    @classmethod
    def connection_failed(cls, peer, reason):
        return cls(CONNECTION_FAILED, peer, None, None,
                   f'Failed to receive the block event from peer {peer}:'
                   f' {reason}')

    @property
    def is_committed(self):
        return self.state == COMMITTED

    def raise_for_state(self):
        if self.state == INVALID:
            raise CommitInvalid(self.reason)
        if self.state == TIMED_OUT:
            raise CommitTimedOut(self.reason)
        if self.state == CONNECTION_FAILED:
            raise CommitConnectionFailed(self.reason)


class OrderingOutcome(namedtuple('OrderingOutcome',
                                 ['is_accepted', 'status_code'])):
    __slots__ = ()

    @classmethod
    def accepted(cls, status_code=SUCCESS):
        return cls(True, status_code)

    @classmethod
    def rejected(cls, status_code):
        return cls(False, status_code)

    @property
    def reason(self):
        if self.is_accepted:
            return None
        return f'Failed to order the transaction. ' \
               f'Error code: {self.status_code}'

    def raise_for_status(self):
        if not self.is_accepted:
            raise OrderingRejected(self.reason)


class SubmissionResult(namedtuple('SubmissionResult',
                                  ['transaction_id', 'status', 'reason'])):
    __slots__ = ()

    @classmethod
    def success(cls, transaction_id):
        return cls(transaction_id, SUCCESS, None)

    @classmethod
    def failure(cls, transaction_id, reason):
        return cls(transaction_id, FAILURE, reason)

    @property
    def succeeded(self):
        return self.status == SUCCESS

    def raise_for_status(self):
        if not self.succeeded:
            raise SubmissionFailed(self.transaction_id, self.reason)
        return self
