"""MongoDB implementation of UserRepository.

Users live in ``users`` keyed by their UUID string. Phones live in ``phones``
with integer ids drawn from the ``counters`` collection and a ``user_id``
back-reference; they are always read back ordered by id.
"""

from datetime import datetime
from logging import getLogger

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import (
    COUNTERS_COLLECTION_NAME,
    PHONES_COLLECTION_NAME,
    USERS_COLLECTION_NAME,
)
from domain.model.errors import ConflictError
from domain.model.user import Phone, User

logger = getLogger(__name__)

PHONE_SEQUENCE = 'phone_id'


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]
        self.phones = db[PHONES_COLLECTION_NAME]
        self.counters = db[COUNTERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users and phones collections."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            create_index_safe(self.phones, [('user_id', 1)], 'idx_phones_user_id')
            return True
        except Exception as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── mapping ───────────────────────────────────────────────

    def _phone_to_domain(self, doc: dict) -> Phone:
        return Phone(
            id=doc['_id'],
            number=doc.get('number'),
            city_code=doc.get('city_code'),
            country_code=doc.get('country_code'),
            user_id=doc.get('user_id'),
        )

    def _to_domain(self, doc: dict, phone_docs: list[dict]) -> User:
        """Convert MongoDB documents to a User domain model."""
        return User(
            id=doc['_id'],
            name=doc.get('name'),
            email=doc.get('email'),
            password_hash=doc.get('password_hash'),
            active=doc.get('active', True),
            created_at=doc.get('created_at'),
            modified_at=doc.get('modified_at'),
            last_login_at=doc.get('last_login_at'),
            token=doc.get('token'),
            phones=[self._phone_to_domain(p) for p in phone_docs],
        )

    def _to_document(self, user: User) -> dict:
        return {
            '_id': user.id,
            'name': user.name,
            'email': user.email,
            'password_hash': user.password_hash,
            'active': user.active,
            'created_at': user.created_at,
            'modified_at': user.modified_at,
            'last_login_at': user.last_login_at,
            'token': user.token,
        }

    def _next_phone_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {'_id': PHONE_SEQUENCE},
            {'$inc': {'seq': 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter['seq']

    # ── write operations ─────────────────────────────────────

    def _restore(self, user_id: str, user_doc: dict | None, phone_docs: list[dict]) -> None:
        """Put a user and its phones back to a snapshot taken before a failed write."""
        try:
            if user_doc:
                self.collection.replace_one({'_id': user_id}, user_doc, upsert=True)
            else:
                self.collection.delete_one({'_id': user_id})
            self.phones.delete_many({'user_id': user_id})
            if phone_docs:
                self.phones.insert_many(phone_docs)
            logger.warning("Rolled back partial user write", extra={"userId": user_id})
        except PyMongoError as e:
            logger.error("Failed to roll back user write", extra={"userId": user_id, "error": str(e)})

    def save(self, user: User) -> User | None:
        """Insert or replace a user, then sync its phone set.

        A failure after the user document was written restores the previous
        user and phone documents before returning None.
        """
        try:
            previous = self.collection.find_one({'_id': user.id})
            previous_phones = self._phones_of(user.id) if previous else []
            self.collection.replace_one({'_id': user.id}, self._to_document(user), upsert=True)
        except DuplicateKeyError:
            logger.warning("User save rejected: email already exists", extra={"userId": user.id})
            raise ConflictError(f"Email {user.email} is already registered")
        except PyMongoError as e:
            logger.error("Failed to save user", extra={"userId": user.id, "error": str(e)})
            return None

        try:
            kept_ids = []
            for phone in user.phones:
                if phone.id is None:
                    phone.id = self._next_phone_id()
                phone.user_id = user.id
                self.phones.replace_one(
                    {'_id': phone.id},
                    {
                        '_id': phone.id,
                        'number': phone.number,
                        'city_code': phone.city_code,
                        'country_code': phone.country_code,
                        'user_id': user.id,
                    },
                    upsert=True,
                )
                kept_ids.append(phone.id)
            self.phones.delete_many({'user_id': user.id, '_id': {'$nin': kept_ids}})
        except PyMongoError as e:
            logger.error("Failed to save phones", extra={"userId": user.id, "error": str(e)})
            self._restore(user.id, previous, previous_phones)
            return None

        logger.debug("User saved", extra={"userId": user.id, "phoneCount": len(user.phones)})
        return self.get_by_id(user.id)

    def update_login(self, user_id: str, token: str, at: datetime) -> bool:
        """Store the latest token and login timestamp for a user. Return True if successful."""
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'token': token, 'last_login_at': at, 'modified_at': at}}
            )
            return result.matched_count > 0
        except PyMongoError as e:
            logger.error("Failed to update login", extra={"userId": user_id, "error": str(e)})
            return False

    def delete(self, user_id: str) -> bool:
        """Delete a user and cascade to its phones. A failed cascade restores both."""
        try:
            doc = self.collection.find_one({'_id': user_id})
            if not doc:
                return False
            phone_docs = self._phones_of(user_id)
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            return False

        try:
            result = self.collection.delete_one({'_id': user_id})
            phones = self.phones.delete_many({'user_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            self._restore(user_id, doc, phone_docs)
            return False

        logger.info("User deleted", extra={
            "userId": user_id,
            "phonesDeleted": phones.deleted_count,
        })
        return result.deleted_count > 0

    # ── read operations ──────────────────────────────────────

    def _phones_of(self, user_id: str) -> list[dict]:
        return list(self.phones.find({'user_id': user_id}).sort('_id', 1))

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'_id': user_id})
            if doc:
                return self._to_domain(doc, self._phones_of(user_id))
            return None
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            return None

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = self.collection.find_one({'email': email})
            if doc:
                return self._to_domain(doc, self._phones_of(doc['_id']))
            return None
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            return None

    def find_all(self) -> list[User]:
        try:
            docs = list(self.collection.find().sort('created_at', 1))
            by_user: dict[str, list[dict]] = {doc['_id']: [] for doc in docs}
            if by_user:
                phone_docs = self.phones.find({'user_id': {'$in': list(by_user)}}).sort('_id', 1)
                for phone_doc in phone_docs:
                    by_user.setdefault(phone_doc['user_id'], []).append(phone_doc)
            return [self._to_domain(doc, by_user[doc['_id']]) for doc in docs]
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            return []

    def exists(self, user_id: str) -> bool:
        try:
            return self.collection.count_documents({'_id': user_id}, limit=1) > 0
        except PyMongoError as e:
            logger.error("Failed to check user", extra={"userId": user_id, "error": str(e)})
            return False

    def get_phone(self, phone_id: int) -> Phone | None:
        """Find a phone by ID. Return Phone or None if not found."""
        try:
            doc = self.phones.find_one({'_id': phone_id})
            return self._phone_to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error("Failed to get phone", extra={"phoneId": phone_id, "error": str(e)})
            return None
