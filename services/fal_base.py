"""Shared plumbing for fal.ai model calls (client, queue polling, logs)"""

import time
from typing import Any, Dict, Optional

import fal_client

from config.settings import settings
from core.logging import logger


class FalModelService:
    """
    Base class for services that call a single fal.ai model

    Subclasses set MODEL and build the arguments; this class handles the
    client, the blocking `subscribe` call and the submit-then-poll variant.
    """

    MODEL: str = ""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self._api_key = api_key
        self._client: Optional[fal_client.SyncClient] = None
        if model:
            self.MODEL = model

    @property
    def client(self) -> fal_client.SyncClient:
        """Lazy load the fal client"""
        if self._client is None:
            self._client = fal_client.SyncClient(key=self._api_key or settings.FAL_KEY)
        return self._client

    def _on_queue_update(self, update: Any) -> None:
        """Forward model logs while the request is running"""
        if isinstance(update, fal_client.InProgress):
            for log in update.logs or []:
                logger.debug(f"[{self.MODEL}] {log.get('message', '')}")

    def _subscribe(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Run the model and block until the result is ready"""
        return self.client.subscribe(
            self.MODEL,
            arguments=arguments,
            with_logs=True,
            on_queue_update=self._on_queue_update,
        )

    def _submit_and_poll(self, arguments: Dict[str, Any], poll_interval: float) -> Dict[str, Any]:
        """
        Submit to the fal queue and poll until the request leaves the queue

        Raises:
            RuntimeError: the request finished in a state other than Completed
        """
        handle = self.client.submit(self.MODEL, arguments=arguments)
        request_id = handle.request_id
        logger.info(f"📨 {self.MODEL} request submitted: {request_id}")

        while True:
            time.sleep(poll_interval)
            status = self.client.status(self.MODEL, request_id, with_logs=True)
            logger.debug(f"{self.MODEL} status: {type(status).__name__}")

            if isinstance(status, (fal_client.Queued, fal_client.InProgress)):
                self._on_queue_update(status)
                continue
            break

        if not isinstance(status, fal_client.Completed):
            raise RuntimeError(f"{self.MODEL} failed with status: {type(status).__name__}")

        return self.client.result(self.MODEL, request_id)
