# SPDX-License-Identifier: Apache-2.0
#
from abc import ABCMeta, abstractmethod


class SessionProvider(object, metaclass=ABCMeta):
    """ Hands out authenticated sessions to the ledger network. """

    @abstractmethod
    async def get_session(self, org_name, user_name):
        """Get an authenticated session for a user of an organization.

        :param org_name: name of the organization
        :param user_name: name of the user
        :return: a ClientSession
        :raises AuthError: when the user cannot be authenticated
        """


class ClientSession(object, metaclass=ABCMeta):
    """ An authenticated handle on the network for one user. """

    @property
    def identity(self):
        """Serialized identity of the session user, used to derive tx ids.

        :return: bytes
        """
        return b''

    @abstractmethod
    def get_channel(self, name):
        """Get a channel handle.

        :param name: the name of the channel
        :return: a ChannelHandle or None if the channel is unknown
        """

    @abstractmethod
    async def query_channels(self, peer):
        """Query the channels a peer has joined.

        :param peer: peer name
        :return: the channel query response
        """

    @abstractmethod
    async def query_installed_chaincodes(self, peer):
        """Query the chaincodes installed on a peer.

        :param peer: peer name
        :return: the chaincode query response
        """

    def close(self):
        """Release the resources held by the session."""
