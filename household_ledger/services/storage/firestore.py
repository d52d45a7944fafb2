"""
Firestore Storage Implementation

DESIGN DECISION: Cloud Firestore is the remote backend because:
1. on_snapshot gives us a live, ordered push of the whole collection
2. The store assigns document ids, so the client never invents them
3. No server of our own to run

TRADEOFFS:
- No multi-document transaction is used for reset (see RemoteExpenseRepository)
- The SDK is blocking; calls are pushed to a worker thread with asyncio.to_thread
- on_snapshot callbacks arrive on the SDK's listener thread and are handed
  back to the owning event loop when one is supplied
"""

import asyncio
from typing import Any, Callable, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore import Query
from tenacity import retry, stop_after_attempt, wait_exponential

from household_ledger.config import FirestoreSettings, get_settings
from household_ledger.services.storage.interface import (
    ConnectionError,
    DocumentBatch,
    DocumentCollection,
    NotFoundError,
)


APP_NAME = "household-ledger"


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles authentication and provides retry logic for the initial connection.
    """

    def __init__(self, settings: Optional[FirestoreSettings] = None):
        self._settings = settings or get_settings().firestore
        self._db = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self):
        """
        Establish the Firestore client.

        Uses service account credentials for authentication.
        """
        if self._db is None:
            try:
                try:
                    app = firebase_admin.get_app(APP_NAME)
                except ValueError:
                    cred = credentials.Certificate(self._settings.credentials_path)
                    options = (
                        {"projectId": self._settings.project_id}
                        if self._settings.project_id
                        else None
                    )
                    app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
                self._db = firestore.client(app)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Firebase credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Firestore: {e}")

        return self._db

    def collection(
        self,
        name: Optional[str] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> 'FirestoreCollection':
        """Get the configured expenses collection (or another one by name)."""
        db = self.connect()
        return FirestoreCollection(
            db.collection(name or self._settings.collection_name),
            loop=loop,
        )


class FirestoreCollection(DocumentCollection):
    """
    DocumentCollection over one Firestore collection reference.
    """

    def __init__(
        self,
        collection_ref,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._ref = collection_ref
        self._loop = loop

    async def add(self, data: dict[str, Any]) -> str:
        _, doc_ref = await asyncio.to_thread(self._ref.add, data)
        return doc_ref.id

    async def delete(self, doc_id: str) -> None:
        doc_ref = self._ref.document(doc_id)
        # Firestore deletes of missing documents succeed silently
        snapshot = await asyncio.to_thread(doc_ref.get)
        if not snapshot.exists:
            raise NotFoundError(f"Expense not found: {doc_id}")
        await asyncio.to_thread(doc_ref.delete)

    async def list_ids(self) -> list[str]:
        return await asyncio.to_thread(
            lambda: [doc_ref.id for doc_ref in self._ref.list_documents()]
        )

    def watch(
        self,
        callback: Callable[[DocumentBatch], None],
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Callable[[], None]:
        query = self._ref
        if order_by:
            direction = Query.DESCENDING if descending else Query.ASCENDING
            query = self._ref.order_by(order_by, direction=direction)

        def on_snapshot(doc_snapshots, changes, read_time) -> None:
            batch = [(doc.id, doc.to_dict() or {}) for doc in doc_snapshots]
            if self._loop is not None and not self._loop.is_closed():
                self._loop.call_soon_threadsafe(callback, batch)
            else:
                callback(batch)

        watch = query.on_snapshot(on_snapshot)
        return watch.unsubscribe
