"""
Protocol constants shared by requesters and providers.
"""

VERSION = "0.1.0"
CLIENT_VENDOR = "credx.dev"

# Data type used for broadcast credential queries.
CREDENTIAL_DATA_TYPE = "dev.credx.credential"

RETRIEVE_CREDENTIAL_ACTION = "dev.credx.credential.retrieve"
HINT_CREDENTIAL_ACTION = "dev.credx.hint"
SAVE_CREDENTIAL_ACTION = "dev.credx.save"
DELETE_CREDENTIAL_ACTION = "dev.credx.delete"
