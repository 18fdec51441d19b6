# SPDX-License-Identifier: Apache-2.0

import logging

from txflow.fabric import Client
from txflow.fabric_network.network import Network

_logger = logging.getLogger(__name__)


class Gateway(object):
    """The gateway is the connection point for an application to access
    the ledger network with one identity.
    It is connected using the path to a connection profile and a session
    provider.
    """

    def __init__(self):
        """ Construct Gateway. """
        self.client = None
        self.current_identity = None
        self.networks = dict()
        self.options = dict()

    def merge_options(self, current_options, additional_options):
        """Merge additional options to current options

        :param current_options: current options
        :param additional_options: additional options to be merged
        :return: result
        """
        result = current_options
        for prop in additional_options:
            if prop in result and isinstance(result[prop], dict) \
                    and isinstance(additional_options[prop], dict):
                self.merge_options(result[prop], additional_options[prop])
            else:
                result[prop] = additional_options[prop]
        return result

    def connect(self, net_profile, options):
        """
        Connect to the Gateway with a connection profile and connection
        options.

        :param net_profile: Path to the Connection Profile, may be None
        :param options: dict with 'session_provider', 'identity'
         ({'org_name': ..., 'name': ...}) and optional 'config' overrides
        :return:
        """
        if 'session_provider' not in options:
            raise ValueError('A session provider must be assigned to a'
                             ' gateway instance')
        if 'identity' not in options:
            raise ValueError('An identity must be assigned to a gateway'
                             ' instance')

        self.merge_options(self.options, options)
        self.client = Client(net_profile=net_profile,
                             session_provider=options['session_provider'],
                             config=options.get('config'))
        self.current_identity = options['identity']

    def get_current_identity(self):
        """:return: The current identity being used in the gateway."""
        return self.current_identity

    def get_client(self):
        """:return: Client instance."""
        return self.client

    def get_options(self):
        """:return: the options being used."""
        return self.options

    def disconnect(self):
        """Clean up and disconnect this Gateway connection"""
        _logger.debug('in disconnect')
        self.networks.clear()
        if self.client is not None:
            self.client.close()

    def get_network(self, network_name):
        """
        Returns an object representing a network

        :param network_name: Name of the channel
        :return: Network instance
        """
        if self.client is None:
            raise ValueError('Gateway is not connected')

        existing_network = self.networks.get(network_name)
        if existing_network:
            _logger.debug(f'get_network - returning existing network:'
                          f' {network_name}')
            return existing_network

        new_network = Network(self, network_name)
        self.networks[network_name] = new_network
        return new_network
