# auth.py
import secrets
import string

import bcrypt
import jwt

from errors import InvalidTokenError, MissingSecretError

JWT_ALGORITHM = "HS256"
_GUEST_ALPHABET = string.ascii_lowercase + string.digits


# Password hashing (direct bcrypt)
def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def random_token(length: int) -> str:
    return "".join(secrets.choice(_GUEST_ALPHABET) for _ in range(length))


def guest_identity():
    """Returns a fresh ``(name, email, password)`` tuple for a guest account."""
    name = f"Guest_{random_token(6)}"
    return name, f"{name.lower()}@guest.com", random_token(13)


class TokenService:
    """Signs and verifies bearer tokens carrying only the user id.

    No expiry is set. Both directions fail closed when no secret is configured.
    """

    def __init__(self, secret):
        self._secret = secret

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def require_secret(self) -> str:
        if not self._secret:
            raise MissingSecretError()
        return self._secret

    def issue(self, user_id: str) -> str:
        return jwt.encode({"userId": user_id}, self.require_secret(), algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> str:
        secret = self.require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError:
            raise InvalidTokenError()
        user_id = payload.get("userId")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError()
        return user_id
