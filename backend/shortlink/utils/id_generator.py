"""
Short id generation.
"""
import secrets
import string

# URL-safe alphabet, same characters nanoid uses
ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_link_id(length: int = 10) -> str:
    """Return a random URL-safe id of the given length."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
