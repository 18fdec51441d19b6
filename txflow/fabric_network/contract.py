# SPDX-License-Identifier: Apache-2.0

import logging

_logger = logging.getLogger(__name__)


class Contract(object):
    """Represents a smart contract (chaincode) instance in a network.
    Applications should get a Contract instance using the
    network's get_contract method.
    :return: an instance of Contract
    """

    def __init__(self, network, cc_name, gateway):
        self.network = network
        self.cc_name = cc_name
        self.gateway = gateway

    def get_network(self):
        return self.network

    def get_cc_name(self):
        return self.cc_name

    def get_options(self):
        return self.gateway.get_options()

    def _target_peers(self, peers):
        if peers:
            return peers
        peers = self.get_options().get('peers')
        if not peers:
            peers = list(self.gateway.get_client().get_net_info('peers')
                         or [])
        return peers

    async def submit_transaction(self, name, args, peers=None):
        """
        Submit a transaction to the ledger. The transaction function will be
        evaluated on the endorsing peers and then submitted to the ordering
        service for committing to the ledger.

        :return: SubmissionResult
        """
        _logger.debug(f'submit_transaction - {name} on {self.cc_name}')
        identity = self.gateway.get_current_identity()
        cli = self.gateway.get_client()
        return await cli.submit_transaction(
            peers=self._target_peers(peers),
            channel_name=self.network.channel_name,
            cc_name=self.cc_name,
            args=args,
            fcn=name,
            user_name=identity['name'],
            org_name=identity['org_name'])

    async def evaluate_transaction(self, name, args, peers=None):
        """
        Evaluate a transaction function and return its results.
        The transaction function will be evaluated on the endorsing peers
        but the responses will not be sent to the ordering service and
        hence will not be committed to the ledger.
        This is used for querying the world state.
        """
        identity = self.gateway.get_current_identity()
        cli = self.gateway.get_client()
        return await cli.query_chaincode(
            peers=self._target_peers(peers),
            channel_name=self.network.channel_name,
            cc_name=self.cc_name,
            args=args,
            fcn=name,
            user_name=identity['name'],
            org_name=identity['org_name'])
