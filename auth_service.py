# auth_service.py
import logging

from sqlalchemy.orm import Session

import queries
from auth import TokenService, hash_password, verify_password, guest_identity
from config import Settings
from errors import DuplicateEmailError, InvalidCredentialsError, NotFoundError, UpstreamError
from schemas import SignupRequest, SigninRequest, ConvertGuestRequest, ProfileUpdateRequest

logger = logging.getLogger(__name__)

GUEST_ATTEMPTS = 5
GUEST_EMAIL_MESSAGE = "Email already in use by a guest account"


class AuthService:
    def __init__(self, settings: Settings, tokens: TokenService):
        self.settings = settings
        self.tokens = tokens

    def _hash(self, password: str) -> str:
        return hash_password(password, rounds=self.settings.bcrypt_rounds)

    def register(self, db: Session, body: SignupRequest):
        self.tokens.require_secret()
        if queries.query_get_user_by_email(db, body.email):
            raise DuplicateEmailError("User already exists")
        user = queries.query_create_user(db, body.name, body.email, self._hash(body.password))
        logger.info(f"Registered user {user.id}")
        return self.tokens.issue(user.id), user

    def login(self, db: Session, body: SigninRequest):
        self.tokens.require_secret()
        user = queries.query_get_user_by_email(db, body.email)
        if not user:
            raise NotFoundError("User does not exist")
        if not verify_password(body.password, user.password_hash):
            raise InvalidCredentialsError()
        return self.tokens.issue(user.id), user

    def guest_login(self, db: Session):
        self.tokens.require_secret()
        for _ in range(GUEST_ATTEMPTS):
            name, email, password = guest_identity()
            if queries.query_get_user_by_email(db, email):
                logger.warning(f"Guest email collision on {email}, regenerating")
                continue
            try:
                user = queries.query_create_user(db, name, email, self._hash(password), is_guest=True)
            except DuplicateEmailError:
                continue
            logger.info(f"Created guest user {user.id}")
            return self.tokens.issue(user.id), user
        raise UpstreamError("Could not allocate a guest account")

    def convert_guest(self, db: Session, user_id: str, body: ConvertGuestRequest):
        guest = queries.query_get_guest(db, user_id)
        if not guest:
            raise NotFoundError("Guest account not found")
        holder = queries.query_get_other_user_by_email(db, body.email, guest.id)
        if holder:
            raise DuplicateEmailError(GUEST_EMAIL_MESSAGE if holder.is_guest else None)
        user = queries.query_update_user(
            db, guest,
            name=body.name,
            email=body.email,
            password_hash=self._hash(body.password),
            is_guest=False,
        )
        logger.info(f"Converted guest {user.id} to a full account")
        return self.tokens.issue(user.id), user

    def get_profile(self, db: Session, user_id: str) -> dict:
        user = queries.query_get_user(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return {
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "profilePicture": user.profile_picture or self.settings.default_profile_picture,
            "isGuest": bool(user.is_guest),
            "rating": user.rating,
            "reports": queries.query_count_reports(db, user.id),
        }

    def update_profile(self, db: Session, user_id: str, body: ProfileUpdateRequest):
        user = queries.query_get_user(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        changes = body.changes()
        new_email = changes.get("email")
        if new_email and new_email != user.email:
            holder = queries.query_get_other_user_by_email(db, new_email, user.id)
            if holder:
                raise DuplicateEmailError(GUEST_EMAIL_MESSAGE if holder.is_guest else None)
        if not changes:
            return user
        return queries.query_update_user(db, user, **changes)
