"""
User accounts backing the auth endpoints. Passwords arrive here already
hashed; hashing and token handling live in main.py.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from database import Record, RecordStore, find_index, next_id
from errors import DuplicateEmailError, NotFoundError
from guard import CUSTOMER

COLLECTION = "users"


def public(user: Record) -> Dict[str, Any]:
    """Never send the password hash."""
    return {k: v for k, v in user.items() if k != "password_hash"}


class UserDirectory:
    def __init__(self, store: RecordStore):
        self.store = store

    def find_by_email(self, email: str) -> Optional[Record]:
        email = email.strip().lower()
        for user in self.store.load(COLLECTION):
            if user.get("email", "").lower() == email:
                return user
        return None

    def find_by_id(self, user_id: Any) -> Optional[Record]:
        for user in self.store.load(COLLECTION):
            if user.get("id") == user_id:
                return user
        return None

    def create(self, name: str, email: str, password_hash: str) -> Record:
        users = self.store.load(COLLECTION, strict=True)
        email = email.strip().lower()
        if any(u.get("email", "").lower() == email for u in users):
            raise DuplicateEmailError(email)
        user = {
            "id": next_id(users),
            "name": name.strip(),
            "email": email,
            "password_hash": password_hash,
            "role": CUSTOMER,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        users.append(user)
        self.store.save_or_raise(COLLECTION, users)
        return user

    def update_profile(self, user_id: Any, name: Optional[str] = None, email: Optional[str] = None) -> Record:
        users = self.store.load(COLLECTION, strict=True)
        index = find_index(users, user_id)
        if index == -1:
            raise NotFoundError("User", user_id)
        user = users[index]

        if email:
            email = email.strip().lower()
            if any(u.get("email", "").lower() == email and u.get("id") != user_id for u in users):
                raise DuplicateEmailError(email)
            user["email"] = email
        if name and name.strip():
            user["name"] = name.strip()
        user["updatedAt"] = datetime.now(timezone.utc).isoformat()

        self.store.save_or_raise(COLLECTION, users)
        return user
