"""Service wiring.

Learn: Everything with process lifetime (token codec, stores, services)
is built once here and attached to app.state by create_app(). Route
dependencies pull from request.app.state instead of importing globals,
so tests can hand in a container built on in-memory stores.
"""

from dataclasses import dataclass
from typing import Optional

from notekeeper.auth.jwt import TokenCodec
from notekeeper.auth.service import AuthService
from notekeeper.config import Settings
from notekeeper.db.engine import Database
from notekeeper.db.stores import NoteStore, SqlNoteStore, SqlUserStore, UserStore
from notekeeper.services.note_service import NoteService


@dataclass
class Services:
    tokens: TokenCodec
    auth: AuthService
    notes: NoteService
    database: Optional[Database] = None


def build_services(
    settings: Settings,
    users: Optional[UserStore] = None,
    notes: Optional[NoteStore] = None,
) -> Services:
    """Build the service container.

    Raises ConfigurationError when the signing secret is missing. With
    no stores given, SQL stores on a fresh Database are used.
    """
    # First, so a bad secret fails before any engine is created
    tokens = TokenCodec(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_days=settings.token_expire_days,
    )

    database = None
    if users is None or notes is None:
        database = Database.from_settings(settings)
        users = users or SqlUserStore(database.session_factory)
        notes = notes or SqlNoteStore(database.session_factory)

    return Services(
        tokens=tokens,
        auth=AuthService(users, tokens, bcrypt_rounds=settings.bcrypt_rounds),
        notes=NoteService(notes),
        database=database,
    )
