# SPDX-License-Identifier: Apache-2.0
#
import json
from hashlib import sha256

import grpc
from Cryptodome import Random

from txflow.util.consts import DEFAULT_NONCE_SIZE


def generate_nonce(size=DEFAULT_NONCE_SIZE):
    """ Generate a secure random for cryptographic use.

    Args:
        size: Number of bytes for the nonce

    Returns: Generated random bytes

    """
    return Random.get_random_bytes(size)


def create_tx_id(creator, nonce=None):
    """Create a transaction id from the creator identity and a nonce.

    :param creator: bytes or str identifying the submitter
    :param nonce: nonce bytes, a fresh one is generated when omitted
    :return: hex digest of sha256(nonce + creator)
    """
    if isinstance(creator, str):
        creator = creator.encode('utf-8')
    if nonce is None:
        nonce = generate_nonce()
    return sha256(nonce + creator).hexdigest()


def encode_args(args):
    """Chaincode functions receive their arguments as one JSON document."""
    return [json.dumps(args)]


def decode_payload(response):
    """Decode the content of a peer response to text.

    :param response: bytes, str, an exception or a ProposalResponse
    :return: the decoded text, empty string if there is nothing to decode
    """
    if isinstance(response, Exception):
        return str(response)
    if isinstance(response, (bytes, bytearray)):
        return bytes(response).decode('utf-8', errors='replace')
    if isinstance(response, str):
        return response

    payload = getattr(response, 'payload', None)
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode('utf-8', errors='replace')
    return payload or ''


def describe_error(err):
    """Return (status, message) for an error-like peer response.

    gRPC failures are described with their status code name and details.
    """
    if isinstance(err, grpc.RpcError) and callable(getattr(err, 'code', None)):
        code = err.code()
        details = err.details() if callable(getattr(err, 'details', None)) \
            else None
        return getattr(code, 'name', code), details or str(err)

    status = getattr(err, 'status', None)
    message = getattr(err, 'message', None)
    if isinstance(err, Exception) and not message:
        message = str(err)
    return status, message
