"""Клиент REST-хранилища документов для профилей и заказов."""

from __future__ import annotations

import asyncio
import functools
import os
from typing import Optional

import httpx
from dotenv import load_dotenv

from cafe.models import utc_now


ENV_VAR_BASE_URL = "DOCSTORE_URL"
ENV_VAR_API_KEY = "DOCSTORE_API_KEY"

USERS_COLLECTION = "users"
ORDERS_COLLECTION = "orders"

load_dotenv()


class DocumentStoreError(Exception):
    """Базовое исключение для ошибок при обращении к хранилищу документов."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentStoreClient:
    """Синхронный клиент API документов: чтение, запись с объединением, создание."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json;charset=UTF-8",
                "Content-Type": "application/json;charset=UTF-8",
            },
            timeout=timeout,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs) -> Optional[dict]:
        """Базовый метод выполнения HTTP-запроса. None — документ не найден."""

        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise DocumentStoreError(f"Ошибка сети при запросе {self._base_url}{path}: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.status_code not in (httpx.codes.OK, httpx.codes.CREATED):
            raise DocumentStoreError(
                f"Ошибка ответа API {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        payload = response.json()
        if not payload.get("success", False):
            raise DocumentStoreError(payload.get("error") or "Неизвестная ошибка API")

        return payload

    @classmethod
    def from_env(
        cls,
        *,
        timeout: float = 10.0,
        url_var: str = ENV_VAR_BASE_URL,
        key_var: str = ENV_VAR_API_KEY,
    ) -> "DocumentStoreClient":
        """Создать клиента, считав адрес и ключ API из .env / переменных окружения."""

        base_url = os.getenv(url_var)
        api_key = os.getenv(key_var)
        if not base_url or not api_key:
            raise DocumentStoreError(
                f"Не заданы переменные окружения {url_var} и {key_var}. "
                "Добавьте их в .env или используйте CAFE_BACKEND=local."
            )
        return cls(base_url, api_key, timeout=timeout)

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        """Получить документ коллекции по id."""

        payload = self._request("GET", f"/documents/{collection}/{doc_id}")
        if payload is None:
            return None
        return payload.get("document") or {}

    def set_document(self, collection: str, doc_id: str, fields: dict, *, merge: bool = True) -> None:
        """Записать документ. При merge=True обновляются только переданные поля."""

        payload = self._request(
            "PATCH",
            f"/documents/{collection}/{doc_id}",
            json={"fields": fields, "merge": merge},
        )
        if payload is None:
            raise DocumentStoreError(f"Коллекция {collection!r} не найдена", status_code=404)

    def add_document(self, collection: str, fields: dict) -> str:
        """Создать документ с id, выданным сервером."""

        payload = self._request("POST", f"/documents/{collection}", json={"fields": fields})
        if payload is None or not payload.get("id"):
            raise DocumentStoreError("Сервер не вернул id созданного документа")
        return payload["id"]

    def query(self, collection: str, field: str, value: str) -> list[dict]:
        """Документы коллекции с field == value."""

        payload = self._request(
            "GET",
            f"/documents/{collection}",
            params={"field": field, "value": value},
        )
        if payload is None:
            return []
        return payload.get("rows") or []

    def close(self) -> None:
        self._client.close()


class RemoteDocumentStore:
    """Хранилище профилей и заказов поверх DocumentStoreClient.

    Клиент синхронный, поэтому вызовы выполняются в executor, чтобы не
    блокировать event loop.
    """

    def __init__(self, client: DocumentStoreClient) -> None:
        self._client = client

    @classmethod
    def from_env(cls) -> "RemoteDocumentStore":
        return cls(DocumentStoreClient.from_env())

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def load_profile(self, uid: str) -> Optional[dict]:
        return await self._run(self._client.get_document, USERS_COLLECTION, uid)

    async def save_profile(self, uid: str, updates: dict) -> None:
        fields = {**updates, "updatedAt": utc_now().isoformat()}
        await self._run(self._client.set_document, USERS_COLLECTION, uid, fields, merge=True)

    async def create_order(self, record: dict) -> str:
        return await self._run(self._client.add_document, ORDERS_COLLECTION, record)

    async def list_orders(self, uid: str) -> list[dict]:
        rows = await self._run(self._client.query, ORDERS_COLLECTION, "userId", uid)
        return sorted(rows, key=lambda row: row.get("createdAt") or "")
