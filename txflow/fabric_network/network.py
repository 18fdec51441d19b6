# SPDX-License-Identifier: Apache-2.0

import logging

from txflow.fabric_network.contract import Contract

_logger = logging.getLogger(__name__)


class Network(object):
    """A Network represents a channel of the ledger network.
    Applications should get a Network instance using the
    gateway's get_network method.
    """

    def __init__(self, gateway, channel_name):
        """ Construct Network. """
        self.gateway = gateway
        self.channel_name = channel_name
        self.contracts = dict()

    def get_contract(self, chaincode_id):
        if chaincode_id not in self.contracts:
            _logger.debug(f'get_contract - creating contract {chaincode_id}'
                          f' on network {self.channel_name}')
            contract = Contract(self, chaincode_id, self.gateway)
            self.contracts[chaincode_id] = contract

        return self.contracts[chaincode_id]
