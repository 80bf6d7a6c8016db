import json
import os
from typing import Any, Dict, Optional

import requests

from mysql_viewer.client.cache import ResponseCache

API_BASE_URL = os.getenv("MYSQL_VIEWER_API_URL", "http://127.0.0.1:3001")

DATA_TTL = 5 * 60
RELATED_TTL = 10 * 60


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ViewerClient:
    """
    Client for the viewer HTTP API. GET responses are cached in a
    ResponseCache; the cache is advisory and only invalidated by the
    mutations made through this client.
    """

    def __init__(self, base_url: str = API_BASE_URL, session=None, cache: Optional[ResponseCache] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.cache = cache or ResponseCache()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = getattr(self.session, method)(f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            raise ApiError(response.status_code, message)
        return response.json()

    def _cached_get(self, cache_key: str, path: str, params: Optional[Dict[str, Any]] = None, ttl: Optional[float] = None) -> Any:
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached
        data = self._request("get", path, params=params)
        self.cache.set(cache_key, data, ttl)
        return data

    # Tables

    def get_tables(self, data_source: str = "default"):
        return self._cached_get(f"tables_{data_source}", "/api/tables", {"dataSource": data_source})

    def get_table_structure(self, table: str, data_source: str = "default"):
        return self._cached_get(
            f"structure_{data_source}_{table}",
            f"/api/tables/{table}/structure",
            {"dataSource": data_source},
        )

    def get_table_data(self, table: str, data_source: str = "default", page: int = 1, limit: int = 50, filters: Optional[Dict[str, Any]] = None):
        filters_json = json.dumps(filters or {}, sort_keys=True)
        return self._cached_get(
            f"data_{data_source}_{table}_{page}_{limit}_{filters_json}",
            f"/api/tables/{table}/data",
            {"dataSource": data_source, "page": page, "limit": limit, "filters": filters_json},
            ttl=DATA_TTL,
        )

    def get_related_data(self, table: str, row_id: Any, data_source: str = "default"):
        return self._cached_get(
            f"related_{data_source}_{table}_{row_id}",
            f"/api/tables/{table}/{row_id}/related",
            {"dataSource": data_source},
            ttl=RELATED_TTL,
        )

    def clear_table_cache(self, table: str, data_source: str = "default") -> None:
        self.cache.remove(f"tables_{data_source}")
        self.cache.remove(f"structure_{data_source}_{table}")
        self.cache.remove_matching(f"data_{data_source}_{table}_")

    # Relationships

    def get_relationships(self):
        return self._cached_get("relationships", "/api/relationships")

    def save_relationships(self, relationships: Dict[str, Any]):
        result = self._request("post", "/api/relationships", json=relationships)
        self.cache.set("relationships", relationships)
        return result

    # Ad-hoc queries are never cached

    def execute_query(self, query: str, data_source: str = "default"):
        return self._request("post", "/api/query", json={"query": query, "dataSource": data_source})

    # Data sources

    def get_datasources(self):
        return self._cached_get("datasources", "/api/datasources")

    def add_datasource(self, source: Dict[str, Any]):
        result = self._request("post", "/api/datasources", json=source)
        self.cache.remove("datasources")
        return result

    def update_datasource(self, name: str, source: Dict[str, Any]):
        result = self._request("put", f"/api/datasources/{name}", json=source)
        self.cache.remove("datasources")
        return result

    def delete_datasource(self, name: str):
        result = self._request("delete", f"/api/datasources/{name}")
        self.cache.remove("datasources")
        return result

    def test_connection(self, config: Dict[str, Any]):
        return self._request("post", "/api/datasources/test", json=config)

    # Cache management

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    def clear_cache(self, key: Optional[str] = None) -> None:
        if key is None:
            self.cache.clear()
        else:
            self.cache.remove(key)
