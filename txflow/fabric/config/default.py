# SPDX-License-Identifier: Apache-2.0
#
import os

from txflow.util.consts import DEFAULT_EVENT_MAX_RETRIES, \
    DEFAULT_ORDERER_TIMEOUT, DEFAULT_PROPOSAL_TIMEOUT, \
    DEFAULT_WAIT_FOR_EVENT_TIMEOUT

ENV_PREFIX = 'TXFLOW_'

DEFAULT = {
    'PROPOSAL_TIMEOUT': DEFAULT_PROPOSAL_TIMEOUT,
    'ORDERER_TIMEOUT': DEFAULT_ORDERER_TIMEOUT,
    'EVENT_TIMEOUT': DEFAULT_WAIT_FOR_EVENT_TIMEOUT,
    'EVENT_MAX_RETRIES': DEFAULT_EVENT_MAX_RETRIES,
}

# connection profile keys under client.timeouts
PROFILE_KEYS = {
    'proposal': 'PROPOSAL_TIMEOUT',
    'orderer': 'ORDERER_TIMEOUT',
    'event': 'EVENT_TIMEOUT',
    'eventMaxRetries': 'EVENT_MAX_RETRIES',
}


def _convert(key, value):
    if key == 'EVENT_MAX_RETRIES':
        return int(value)
    return float(value)


def load_config(overrides=None, environ=None):
    """Build the effective settings.

    Precedence is overrides, then TXFLOW_* environment variables, then
    DEFAULT.

    :param overrides: dict using DEFAULT keys
    :param environ: environment mapping, os.environ by default
    :return: dict using DEFAULT keys
    """
    if environ is None:
        environ = os.environ

    config = dict(DEFAULT)
    for key in DEFAULT.keys():
        value = environ.get(ENV_PREFIX + key)
        if value is not None:
            try:
                config[key] = _convert(key, value)
            except ValueError as e:
                raise ValueError(f'Invalid value {value!r} for environment'
                                 f' variable {ENV_PREFIX + key}') from e

    for key, value in (overrides or {}).items():
        if key not in DEFAULT:
            raise ValueError(f'Unknown configuration key {key}')
        config[key] = _convert(key, value)

    return config
