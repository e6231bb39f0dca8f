"""MongoDB implementation of UserRepository.

Phones are embedded in the user document, so a user and its phones are
written and deleted together. The unique index on ``email`` backs the
duplicate check done by the services.

Each inserted document gets a ``seq`` number from an atomic counter, so
listing order is insertion order even for users created within the same
millisecond. ``seq`` is storage-only: updates ``$set`` the user fields and
leave it untouched.
"""

from logging import getLogger
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from adapter.mongodb import COUNTERS_COLLECTION_NAME, USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, NotFoundError
from domain.model.user import Phone, User

logger = getLogger(__name__)

USERS_SEQUENCE_ID = 'users'
LIST_ORDER = [('created_at', 1), ('seq', 1)]


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]
        self.counters = db[COUNTERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, LIST_ORDER, 'idx_users_created_at_seq')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── mapping ──────────────────────────────────────────────

    @staticmethod
    def _phone_to_doc(phone: Phone) -> dict:
        return {
            'id': phone.id,
            'number': phone.number,
            'city_code': phone.city_code,
            'country_code': phone.country_code,
            'user_id': phone.user_id,
        }

    def _to_document(self, user: User) -> dict:
        return {
            '_id': user.id,
            'name': user.name,
            'email': user.email,
            'password_hash': user.password_hash,
            'active': user.active,
            'token': user.token,
            'created_at': user.created_at,
            'updated_at': user.updated_at,
            'last_login': user.last_login,
            'phones': [self._phone_to_doc(p) for p in user.phones],
        }

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            name=doc['name'],
            email=doc['email'],
            password_hash=doc['password_hash'],
            created_at=doc['created_at'],
            active=doc.get('active', True),
            token=doc.get('token'),
            updated_at=doc.get('updated_at'),
            last_login=doc.get('last_login'),
            phones=[
                Phone(
                    id=p['id'],
                    number=p['number'],
                    city_code=p['city_code'],
                    country_code=p['country_code'],
                    user_id=p.get('user_id', doc['_id']),
                )
                for p in doc.get('phones', [])
            ],
        )

    def _next_seq(self) -> int:
        counter = self.counters.find_one_and_update(
            {'_id': USERS_SEQUENCE_ID},
            {'$inc': {'seq': 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter['seq']

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        try:
            doc = self._to_document(user)
            doc['seq'] = self._next_seq()
            self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": user.email})
            raise DuplicateEmailError(user.email) from None
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user.email, "error": str(e)})
            raise

        logger.debug("User inserted", extra={"userId": user.id})
        return user

    def save(self, user: User) -> User:
        try:
            fields = self._to_document(user)
            del fields['_id']
            result = self.collection.update_one({'_id': user.id}, {'$set': fields})
        except DuplicateKeyError:
            logger.warning("User update failed: email already exists", extra={"userId": user.id, "email": user.email})
            raise DuplicateEmailError(user.email) from None
        except PyMongoError as e:
            logger.error("Failed to save user", extra={"userId": user.id, "error": str(e)})
            raise

        if result.matched_count == 0:
            raise NotFoundError("User not found")
        return user

    def save_phones(self, user_id: str, phones: list[Phone]) -> bool:
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'phones': [self._phone_to_doc(p) for p in phones]}},
            )
        except PyMongoError as e:
            logger.error("Failed to save phones", extra={"userId": user_id, "error": str(e)})
            raise
        return result.matched_count > 0

    def delete(self, user_id: str) -> bool:
        try:
            result = self.collection.delete_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to delete user", extra={"userId": user_id, "error": str(e)})
            raise
        return result.deleted_count > 0

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        try:
            doc = self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def get_by_email(self, email: str) -> User | None:
        try:
            doc = self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def exists_by_email(self, email: str) -> bool:
        try:
            return self.collection.count_documents({'email': email}, limit=1) > 0
        except PyMongoError as e:
            logger.error("Failed to check email", extra={"email": email, "error": str(e)})
            raise

    def find_all(self) -> list[User]:
        try:
            docs = list(self.collection.find({}).sort(LIST_ORDER))
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise
        return [self._to_domain(doc) for doc in docs]
