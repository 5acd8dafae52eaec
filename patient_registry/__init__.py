"""Patient Registry.

Token-authenticated management of patient records, their diagnosed
conditions and file attachments, backed by a volatile in-memory store.
"""

__version__ = "1.0.0"
