# SPDX-License-Identifier: Apache-2.0


class TxFlowError(Exception):
    pass


class AuthError(TxFlowError):
    """Raised by a session provider that cannot authenticate a user."""


class ChannelNotFoundError(TxFlowError):
    pass


class ProposalSendError(TxFlowError):
    """A proposal could not be delivered to the endorsing peers."""


class ProposalUnavailable(TxFlowError):
    """No proposal result could be obtained, even after the retry."""


class NoValidResponses(TxFlowError):
    """Every endorsing peer answered with an error.

    :param errors: sequence of ErrorDetail, one per failed peer
    """

    def __init__(self, errors):
        self.errors = tuple(errors)
        lines = [f'No valid responses from any peers. '
                 f'{len(self.errors)} peer error responses:']
        lines += [str(e) for e in self.errors]
        super().__init__('\n    '.join(lines))


class CommitTimedOut(TxFlowError):
    pass


class CommitInvalid(TxFlowError):
    pass


class CommitConnectionFailed(TxFlowError):
    pass


class OrderingRejected(TxFlowError):
    pass


class SubmissionFailed(TxFlowError):
    """Raised by SubmissionResult.raise_for_status on a failed submission."""

    def __init__(self, transaction_id, reason):
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f'Failed to invoke chaincode. txId: {transaction_id}'
                         f', cause: {reason}')


class QueryError(TxFlowError):
    pass
