# /services/identity.py
"""
Identity collaborators: who is acting, whether they are connected, and
their ability to sign an arbitrary message.
"""
from typing import Optional, Protocol

from errors import UserDeclined


class Identity(Protocol):
    address: Optional[str]

    @property
    def connected(self) -> bool: ...

    async def sign(self, message: str) -> str: ...


class RequestIdentity:
    """
    Identity carried by an API request.

    The client signs the published challenge on its side and sends the
    signature along; a request without one is a declined signing request.
    """

    def __init__(self, address: Optional[str], signature: Optional[str] = None):
        self.address = address.strip() if address else None
        self.signature = signature

    @property
    def connected(self) -> bool:
        return bool(self.address)

    async def sign(self, message: str) -> str:
        if not self.signature:
            raise UserDeclined()
        return self.signature

