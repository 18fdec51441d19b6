# SPDX-License-Identifier: Apache-2.0
#

# Set default logging handler to avoid "No handler found" warnings.
import logging
from logging import NullHandler

from .client import Client  # noqa

logging.getLogger(__name__).addHandler(NullHandler())
