"""
Numeris - Password hashing (bcrypt)
"""

import bcrypt

from errors import EmptyInputError, PasswordMismatchError

BCRYPT_ROUNDS = 12


class PasswordHasher:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        if not password:
            raise EmptyInputError("invalid input password from user")
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, hashed: str, password: str) -> bool:
        """True when `password` matches `hashed`; raises otherwise."""
        if not password or not hashed:
            raise EmptyInputError("invalid login details")
        try:
            ok = bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            ok = False
        if not ok:
            raise PasswordMismatchError("invalid input password")
        return True
