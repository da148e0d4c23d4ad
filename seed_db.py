# seed_db.py
import logging

from attendease.logic_models import CreditPackage, User
from attendease.settings import DEFAULT_PACKAGES, DEFAULT_USERS
from attendease.storage import make_store

log = logging.getLogger(__name__)


def upsert_defaults(state):
    """
    Add the demo accounts and default packages that are missing.
    Existing rows (matched by id) are left alone.
    """
    existing_users = {u.id for u in state.users}
    created = 0
    for raw in DEFAULT_USERS:
        if raw["id"] not in existing_users:
            state.users.append(User.from_dict(raw))
            created += 1

    existing_pkgs = {p.id for p in state.packages}
    for raw in DEFAULT_PACKAGES:
        if raw["id"] not in existing_pkgs:
            state.packages.append(CreditPackage.from_dict(raw))
            created += 1
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    store = make_store()
    state = store.load()
    created = upsert_defaults(state)
    store.save(state)
    print(f"✅ Seeded {created} row(s) into {type(store).__name__}")
