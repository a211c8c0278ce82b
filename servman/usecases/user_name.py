from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Optional

from servman.domain.operations import AsyncOperation, BehaviorValue, CancelToken, ValueStream
from servman.domain.ports import UseCaseError, UserNameStoragePort

_log = logging.getLogger(__name__)


class UserNameValue:
    """Process-held user name backed by ``UserNameStoragePort``.

    ``observe`` emits the stored name on subscribe and every later change;
    ``update`` persists first and only then publishes the new value.
    """

    def __init__(self, storage: UserNameStoragePort, executor: Executor) -> None:
        self._storage = storage
        self._executor = executor
        self._value: BehaviorValue[str] = BehaviorValue(
            executor=executor,
            loader=storage.load_user_name,
            name="user_name",
        )

    @property
    def current(self) -> Optional[str]:
        return self._value.value

    def observe(self) -> ValueStream[str]:
        return self._value.observe()

    def update(self, new_value: str) -> AsyncOperation[None]:
        name = new_value if isinstance(new_value, str) else str(new_value)

        def _work(token: CancelToken) -> None:
            token.raise_if_cancelled()
            try:
                self._storage.save_user_name(name)
            except Exception as exc:
                raise UseCaseError("USER_NAME_SAVE_FAILED", str(exc)) from exc
            # Persisted values are published even if the caller went away.
            self._value.set(name)
            _log.debug("User name updated")

        return AsyncOperation(_work, executor=self._executor, name="update_user_name")


__all__ = ["UserNameValue"]
