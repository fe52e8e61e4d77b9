"""
Engineer link exceptions.
"""


class TokenInvalid(Exception):
    """Raised for unknown or malformed engineer tokens and short codes.

    The message is identical for both cases so callers never learn whether a
    value was close to a real one.
    """

    def __init__(self):
        super().__init__("This link has expired or is no longer valid")
