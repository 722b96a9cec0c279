from supabase import create_client, Client
from app.config import settings
from app.database.store import Store, SupabaseStore
from app.database.memory_store import InMemoryStore


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None
    _store: Store = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Policy is enforced in-process before every call."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def get_store(cls) -> Store:
        if cls._store is None:
            if settings.uses_memory_store:
                cls._store = InMemoryStore()
            else:
                cls._store = SupabaseStore(cls.get_service_client())
        return cls._store

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None
        cls._store = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_store() -> Store:
    return SupabaseClient.get_store()
