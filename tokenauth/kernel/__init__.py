"""
Stable Kernel Layer

- Identity Core (credential hashing, token issuing, session rotation)
- Credential Store (user records and their refresh-token fingerprint)
- Data models
"""
