# SPDX-License-Identifier: Apache-2.0

from txflow.util.utils import create_tx_id


class TransactionRequest(object):
    """Class represents a chaincode transaction request.

    Instances are read-only: the transaction id is fixed at construction
    and travels unchanged through proposal, ordering and commit watching.
    """

    def __init__(self, targets, cc_name, fcn, args, channel_name, tx_id):
        """ Construct transaction request

        :param targets: names of the endorsing peers
        :param cc_name: chaincode name
        :param fcn: chaincode function name
        :param args: function arguments
        :param channel_name: the name of the channel
        :param tx_id: transaction id
        """
        self._targets = tuple(targets)
        self._cc_name = cc_name
        self._fcn = fcn
        self._args = tuple(args) if args is not None else ()
        self._channel_name = channel_name
        self._tx_id = tx_id

    def __repr__(self):
        return (f'TransactionRequest(tx_id={self._tx_id!r}, '
                f'channel={self._channel_name!r}, cc={self._cc_name!r}, '
                f'fcn={self._fcn!r}, targets={list(self._targets)!r})')

    @property
    def targets(self):
        """Get the endorsing peers"""
        return self._targets

    @property
    def cc_name(self):
        """Get chaincode name"""
        return self._cc_name

    @property
    def fcn(self):
        """Get function name"""
        return self._fcn

    @property
    def args(self):
        """Get function arguments"""
        return self._args

    @property
    def channel_name(self):
        """Get channel name"""
        return self._channel_name

    @property
    def tx_id(self):
        """Get transaction id"""
        return self._tx_id


class OrderingRequest(object):
    """The endorsed transaction handed to the ordering service."""

    def __init__(self, tx_id, responses, proposal):
        self._tx_id = tx_id
        self._responses = tuple(responses)
        self._proposal = proposal

    @property
    def tx_id(self):
        return self._tx_id

    @property
    def responses(self):
        """Valid endorsements, as (peer, ProposalResponse) pairs"""
        return self._responses

    @property
    def proposal(self):
        return self._proposal


def validate(request):
    """Validate transaction request

    Args:
        request: transaction request

    Returns: transaction request if no error

    Raises:
            ValueError: Invalid transaction request

    """
    if not request:
        raise ValueError("Missing transaction request object")

    if not request.targets:
        raise ValueError("Missing 'targets' parameter "
                         "in the transaction request object")

    if not request.cc_name:
        raise ValueError("Missing 'cc_name' parameter "
                         "in the transaction request object")

    if not request.fcn:
        raise ValueError("Missing 'fcn' parameter "
                         "in the transaction request object")

    if not request.channel_name:
        raise ValueError("Missing 'channel_name' parameter "
                         "in the transaction request object")
    return request


def create_tx_request(targets, cc_name, fcn, args, channel_name,
                      creator, tx_id=None):
    """Create transaction request

    Args:
        targets: endorsing peer names
        cc_name: chaincode name
        fcn: chaincode function
        args: function arguments
        channel_name: channel name
        creator: identity of the submitter, used to derive the tx id
        tx_id: explicit transaction id

    Returns: a transaction request instance

    """
    if tx_id is None:
        tx_id = create_tx_id(creator)
    request = TransactionRequest(targets, cc_name, fcn, args,
                                 channel_name, tx_id)
    return validate(request)
