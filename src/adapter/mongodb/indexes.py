"""MongoDB index management utilities.

Index creation that tolerates an older index occupying the same name or keys,
used by MongoUserRepository.ensure_indexes at app startup.
"""

from logging import getLogger

from pymongo.errors import PyMongoError

logger = getLogger(__name__)


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create an index, replacing one that clashes by name or by key pattern."""
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if "already exists" not in str(e) and "Conflict" not in str(e):
            raise

    stale = _find_conflicting_index(collection, keys, name)
    if stale is None:
        logger.error("Failed to resolve index conflict", extra={"index": name})
        return False

    logger.warning("Dropping conflicting index", extra={"index": stale})
    collection.drop_index(stale)
    collection.create_index(keys, name=name, **kwargs)
    logger.info("Recreated index", extra={"index": name})
    return True


def _find_conflicting_index(collection, keys: list, name: str) -> str | None:
    wanted = dict(keys)
    for idx_name, idx_info in collection.index_information().items():
        if idx_name == '_id_':
            continue
        same_keys = dict(idx_info.get('key', [])) == wanted
        if (idx_name == name) != same_keys:
            return idx_name
    return None


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.user_repository import MongoUserRepository

    return MongoUserRepository(db).ensure_indexes()
