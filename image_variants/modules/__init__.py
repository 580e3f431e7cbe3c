"""Feature modules.

- variants: Variant schema, key/URL derivation and the Pillow-backed engine
"""
