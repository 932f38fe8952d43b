from supabase import create_client, Client
from quizbuilder.config import settings
from typing import Dict, List, Optional
from uuid import uuid4
import copy
import logging


class EntityNotFoundError(LookupError):
    """Raised when an entity id does not exist in the store"""


def _split_sort(sort: str):
    """'-created_date' -> ('created_date', True)"""
    if sort.startswith("-"):
        return sort[1:], True
    return sort, False


# Supabase Client Setup
def get_supabase_client() -> Client:
    """Get Supabase client for authentication operations"""
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key.get_secret_value()
    )

def get_supabase_admin_client() -> Client:
    """Get Supabase admin client for entity operations"""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key.get_secret_value()
    )


class Entity:
    """Generic CRUD handle for one entity type (one table)"""

    def __init__(self, database, name: str):
        self.database = database
        self.name = name

    def create(self, data: dict) -> dict:
        return self.database.insert(self.name, data)

    def update(self, entity_id: str, patch: dict) -> dict:
        updated = self.database.update(self.name, patch, {"id": entity_id})
        if updated is None:
            raise EntityNotFoundError(f"{self.name} {entity_id} not found")
        return updated

    def delete(self, entity_id: str):
        deleted = self.database.delete(self.name, {"id": entity_id})
        if not deleted:
            raise EntityNotFoundError(f"{self.name} {entity_id} not found")
        return deleted

    def get(self, entity_id: str) -> Optional[dict]:
        rows = self.database.select(self.name, filters={"id": entity_id}, limit=1)
        return rows[0] if rows else None

    def list(self, sort: Optional[str] = None) -> List[dict]:
        return self.database.select(self.name, sort=sort)

    def filter(self, criteria: dict, sort: Optional[str] = None) -> List[dict]:
        return self.database.select(self.name, filters=criteria, sort=sort)


class Database:
    """Entity operations using Supabase REST API"""

    def __init__(self, client: Client = None, auth_client: Client = None):
        self.client = client or get_supabase_admin_client()
        self.auth_client = auth_client or self.client

    def entity(self, name: str) -> Entity:
        return Entity(self, name)

    def insert(self, table: str, data: dict):
        """Insert data into table"""
        try:
            row = dict(data)
            row.setdefault("id", str(uuid4()))
            result = self.client.table(table).insert(row).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logging.error(f"Insert error in {table}: {e}")
            raise e

    def select(self, table: str, columns: str = "*", filters: dict = None, limit: int = None, sort: str = None):
        """Select data from table"""
        try:
            query = self.client.table(table).select(columns)

            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)

            if sort:
                column, descending = _split_sort(sort)
                query = query.order(column, desc=descending)

            if limit:
                query = query.limit(limit)

            result = query.execute()
            return result.data
        except Exception as e:
            logging.error(f"Select error in {table}: {e}")
            raise e

    def update(self, table: str, data: dict, filters: dict):
        """Update data in table"""
        try:
            query = self.client.table(table).update(data)

            for key, value in filters.items():
                query = query.eq(key, value)

            result = query.execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logging.error(f"Update error in {table}: {e}")
            raise e

    def delete(self, table: str, filters: dict):
        """Delete data from table"""
        try:
            query = self.client.table(table).delete()

            for key, value in filters.items():
                query = query.eq(key, value)

            result = query.execute()
            return result.data
        except Exception as e:
            logging.error(f"Delete error in {table}: {e}")
            raise e

    def get_user(self, token: str) -> Optional[dict]:
        """Resolve a Supabase JWT to a user dict"""
        try:
            response = self.auth_client.auth.get_user(token)
        except Exception as e:
            logging.error(f"Supabase token verification failed: {e}")
            return None
        if not response or not response.user:
            return None
        user = response.user
        return {
            "id": user.id,
            "email": user.email,
            "metadata": user.user_metadata or {}
        }


class MemoryDatabase:
    """In-process entity store with the same surface as Database"""

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.tokens: Dict[str, dict] = {}

    def entity(self, name: str) -> Entity:
        return Entity(self, name)

    def _rows(self, table: str) -> List[dict]:
        return self.tables.setdefault(table, [])

    @staticmethod
    def _matches(row: dict, filters: Optional[dict]) -> bool:
        if not filters:
            return True
        return all(row.get(key) == value for key, value in filters.items())

    def insert(self, table: str, data: dict):
        row = copy.deepcopy(data)
        row.setdefault("id", str(uuid4()))
        self._rows(table).append(row)
        return copy.deepcopy(row)

    def select(self, table: str, columns: str = "*", filters: dict = None, limit: int = None, sort: str = None):
        rows = [row for row in self._rows(table) if self._matches(row, filters)]

        if sort:
            column, descending = _split_sort(sort)
            # rows missing the column sort first
            rows.sort(key=lambda row: (row.get(column) is not None, row.get(column)), reverse=descending)

        if limit:
            rows = rows[:limit]

        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]

        return copy.deepcopy(rows)

    def update(self, table: str, data: dict, filters: dict):
        updated = None
        for row in self._rows(table):
            if self._matches(row, filters):
                row.update(copy.deepcopy(data))
                updated = row
        return copy.deepcopy(updated) if updated is not None else None

    def delete(self, table: str, filters: dict):
        rows = self._rows(table)
        removed = [row for row in rows if self._matches(row, filters)]
        self.tables[table] = [row for row in rows if not self._matches(row, filters)]
        return removed

    def register_token(self, token: str, user: dict):
        self.tokens[token] = user

    def get_user(self, token: str) -> Optional[dict]:
        return self.tokens.get(token)


_database = None

def get_db():
    """FastAPI dependency returning the configured entity store"""
    global _database
    if _database is None:
        if settings.use_memory_store:
            logging.info("Using in-memory entity store")
            _database = MemoryDatabase()
        else:
            _database = Database(get_supabase_admin_client(), get_supabase_client())
    return _database
