# SPDX-License-Identifier: Apache-2.0

import json
import logging

from txflow.fabric.chaincode import Chaincode
from txflow.fabric.config.default import PROFILE_KEYS, load_config
from txflow.fabric.errors import AuthError, ChannelNotFoundError, QueryError
from txflow.fabric.transaction.tx_response import SubmissionResult

consoleHandler = logging.StreamHandler()
_logger = logging.getLogger(__name__)

_logger.setLevel(logging.DEBUG)
_logger.addHandler(consoleHandler)


class Client(object):
    """Main interaction handler with end user.

    The client owns the sessions and channel handles it obtains from its
    session provider: they are created on first use, reused by later
    calls and released by close().

    :param net_profile: path of a JSON connection profile
    :param session_provider: SessionProvider used to authenticate users
    :param config: settings overriding the profile, keyed as
     txflow.fabric.config.default.DEFAULT
    """

    def __init__(self, net_profile=None, session_provider=None, config=None):
        """ Construct client"""
        self.network_info = dict()
        self._session_provider = session_provider
        self._sessions = dict()
        self._channels = dict()
        self._overrides = dict()

        if net_profile:
            _logger.debug("Init client with profile={}".format(net_profile))
            self.init_with_net_profile(net_profile)

        if config:
            self._overrides.update(config)
        self._config = load_config(self._overrides)

    def init_with_net_profile(self, profile_path='network.json'):
        """
        Load the connection profile from external file to network_info.

        The ``client.timeouts`` section overrides the default timeouts.

        :param profile_path: The connection profile file path
        :return:
        """
        with open(profile_path, 'r') as profile:
            d = json.load(profile)
            self.network_info = d

        timeouts = self.get_net_info('client', 'timeouts') or {}
        for name, value in timeouts.items():
            if name not in PROFILE_KEYS:
                _logger.warning(f'Unknown timeout {name} in profile'
                                f' {profile_path}')
                continue
            self._overrides[PROFILE_KEYS[name]] = value
        self._config = load_config(self._overrides)

    def get_net_info(self, *key_path):
        """
        Get the info from self.network_info
        :param key_path: path of the key, e.g., a.b.c means info['a']['b']['c']
        :return: The value, or None
        """
        result = self.network_info
        if result:
            for k in key_path:
                try:
                    result = result[k]
                except (KeyError, TypeError):
                    _logger.warning(f'No key path {key_path} exists'
                                    f' in net info')
                    return None

        return result

    @property
    def config(self):
        """
        Get the effective settings.

        :return: settings as dict
        """
        return dict(self._config)

    @property
    def session_provider(self):
        return self._session_provider

    @session_provider.setter
    def session_provider(self, session_provider):
        self._session_provider = session_provider

    async def get_session(self, org_name, user_name):
        """Get the session of a user, authenticating on first use.

        :param org_name: Name of org belongs to
        :param user_name: Name of the user
        :return: ClientSession
        :raises AuthError: when the user cannot be authenticated
        """
        key = (org_name, user_name)
        if key not in self._sessions:
            if self._session_provider is None:
                raise AuthError('No session provider configured on the'
                                ' client')
            session = await self._session_provider.get_session(org_name,
                                                               user_name)
            _logger.info(f'Successfully got the session for the organization'
                         f' "{org_name}" and user "{user_name}"')
            self._sessions[key] = session
        return self._sessions[key]

    async def get_channel(self, channel_name, user_name, org_name):
        """Get a channel handle, cached per organization and user.

        :param channel_name: The name of the channel.
        :param user_name: Name of the user
        :param org_name: Name of org belongs to
        :return: ChannelHandle
        :raises ChannelNotFoundError: if the session does not know the channel
        """
        key = (org_name, user_name, channel_name)
        if key not in self._channels:
            session = await self.get_session(org_name, user_name)
            channel = session.get_channel(channel_name)
            if channel is None:
                message = f'Channel {channel_name} was not defined in the' \
                          f' connection profile'
                _logger.error(message)
                raise ChannelNotFoundError(message)
            self._channels[key] = channel
        return self._channels[key]

    def close(self):
        """Release every session and channel handle held by the client."""
        sessions = list(self._sessions.values())
        self._channels.clear()
        self._sessions.clear()
        for session in sessions:
            session.close()

    def new_chaincode(self, cc_name):
        return Chaincode(cc_name,
                         proposal_timeout=self._config['PROPOSAL_TIMEOUT'],
                         orderer_timeout=self._config['ORDERER_TIMEOUT'],
                         event_timeout=self._config['EVENT_TIMEOUT'],
                         event_max_retries=self._config['EVENT_MAX_RETRIES'])

    async def _creator(self, org_name, user_name):
        session = await self.get_session(org_name, user_name)
        return session.identity or f'{user_name}@{org_name}'

    async def submit_transaction(self, peers, channel_name, cc_name, args,
                                 fcn, user_name, org_name):
        """
        Invoke chaincode for ledger update and wait for the commit

        :param peers: names of the endorsing peers
        :param channel_name: the name of the channel to send tx proposal
        :param cc_name: chaincode name
        :param args: function arguments
        :param fcn: chaincode function
        :param user_name: Name of the submitting user
        :param org_name: Name of org the user belongs to
        :return: SubmissionResult
        """
        _logger.info(f'============ invokeChaincode - chaincode {cc_name},'
                     f' function {fcn}, on the channel {channel_name}'
                     f' for org: {org_name}')
        try:
            channel = await self.get_channel(channel_name, user_name,
                                             org_name)
            creator = await self._creator(org_name, user_name)
            chaincode = self.new_chaincode(cc_name)
            return await chaincode.invoke(channel, peers, args, fcn=fcn,
                                          creator=creator)
        except (AuthError, ChannelNotFoundError) as e:
            _logger.error(f'Failed to invoke chaincode. cause: {e}')
            return SubmissionResult.failure(None, str(e))
        except Exception as e:
            _logger.exception(f'Failed to invoke chaincode {cc_name},'
                              f' function {fcn}. cause: {e}')
            return SubmissionResult.failure(None, str(e) or repr(e))

    async def query_chaincode(self, peers, channel_name, cc_name, args, fcn,
                              user_name, org_name):
        """
        Query chaincode

        :param peers: names of the peers to query
        :param channel_name: the name of the channel
        :param cc_name: chaincode name
        :param args: function arguments
        :param fcn: chaincode function
        :param user_name: Name of the querying user
        :param org_name: Name of org the user belongs to
        :return: list of decoded results
        """
        _logger.info(f'============ START queryChaincode for fcn: {fcn}'
                     f' on the channel {channel_name} for org: {org_name}')
        channel = await self.get_channel(channel_name, user_name, org_name)
        creator = await self._creator(org_name, user_name)
        chaincode = self.new_chaincode(cc_name)
        return await chaincode.query(channel, peers, args, fcn=fcn,
                                     creator=creator)

    def _check_payload(self, method, response_payload):
        if not response_payload:
            _logger.error(f'##### {method} - response_payload is null')
            raise QueryError(f'{method}: response payload is null')
        _logger.debug(response_payload)
        return response_payload

    async def get_channels_for_peer(self, peer, user_name, org_name):
        """
        Queries channel names joined by a peer

        :param peer: peer name
        :param user_name: Name of the user
        :param org_name: Name of org belongs to
        :return: the channel query response
        """
        session = await self.get_session(org_name, user_name)
        return self._check_payload('get_channels_for_peer',
                                   await session.query_channels(peer))

    async def get_chaincodes_for_peer(self, peer, user_name, org_name):
        """
        Queries chaincodes installed on a peer

        :param peer: peer name
        :param user_name: Name of the user
        :param org_name: Name of org belongs to
        :return: the installed chaincodes response
        """
        session = await self.get_session(org_name, user_name)
        return self._check_payload(
            'get_chaincodes_for_peer',
            await session.query_installed_chaincodes(peer))

    async def query_channel_info(self, peer, channel_name, user_name,
                                 org_name):
        """
        Queries information of a channel

        :return: the blockchain info of the channel
        """
        channel = await self.get_channel(channel_name, user_name, org_name)
        return self._check_payload('query_channel_info',
                                   await channel.query_info(peer))

    async def get_instantiated_chaincodes(self, peer, channel_name,
                                          user_name, org_name):
        channel = await self.get_channel(channel_name, user_name, org_name)
        return self._check_payload(
            'get_instantiated_chaincodes',
            await channel.query_instantiated_chaincodes(peer))

    async def get_block_by_number(self, peer, channel_name, block_id,
                                  user_name, org_name):
        """
        Queries a block by number

        :param block_id: block number, as int or numeric string
        :return: the block
        """
        channel = await self.get_channel(channel_name, user_name, org_name)
        return self._check_payload(
            'get_block_by_number',
            await channel.query_block(int(block_id), peer))

    async def get_transaction_by_id(self, peer, channel_name, transaction_id,
                                    user_name, org_name):
        channel = await self.get_channel(channel_name, user_name, org_name)
        return self._check_payload(
            'get_transaction_by_id',
            await channel.query_transaction(transaction_id, peer))
