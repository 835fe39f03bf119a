from __future__ import annotations

import uuid


def generate_run_id() -> str:
    """
    Назначение:
        Сгенерировать идентификатор запуска/сессии соединения.
    """
    return str(uuid.uuid4())
