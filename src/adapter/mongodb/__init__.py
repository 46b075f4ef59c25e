"""MongoDB adapter: collection names shared by the repositories."""

USERS_COLLECTION_NAME = 'users'
PHONES_COLLECTION_NAME = 'phones'
COUNTERS_COLLECTION_NAME = 'counters'
