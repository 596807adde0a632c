"""Navigator Vault settings, read from environment variables."""
import os

# base64-encoded 32-byte AES-256 key
ENCRYPTION_KEY_VAR = os.environ.get(
    'VAULT_ENCRYPTION_KEY_VAR', 'PASSWORD_ENCRYPTION_KEY'
)

# storage attribute holding the record owner
OWNER_KEY = 'ownerId'

VAULT_LOGGER = 'navigator.vault'
