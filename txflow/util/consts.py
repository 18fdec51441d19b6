# SPDX-License-Identifier: Apache-2.0

DEFAULT_PROPOSAL_TIMEOUT = 30  # s
DEFAULT_ORDERER_TIMEOUT = 30  # s
DEFAULT_WAIT_FOR_EVENT_TIMEOUT = 10  # s
DEFAULT_EVENT_MAX_RETRIES = 10

DEFAULT_NONCE_SIZE = 24

SUCCESS_STATUS = 200
ERROR_STATUS_THRESHOLD = 400

# broker and commit status codes
ORDERER_SUCCESS = 'SUCCESS'
ORDERER_TIMEOUT = 'TIMEOUT'
TX_VALID = 'VALID'

# decoded peer payloads containing one of these are chaincode failures
FAILURE_MARKERS = (
    'transaction returned with failure',
    'failed to execute transaction',
)

HISTORY_QUERY_FCN = 'queryHistoryForKey'
RECORD_KEY = 'Record'
