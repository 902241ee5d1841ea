from __future__ import annotations

from typing import Iterator

import mongomock
import pytest

from datastore.mongo import MongoGateway


@pytest.fixture
def gateway() -> Iterator[MongoGateway]:
    storage = MongoGateway(
        uri="mongodb://localhost:27017",
        database_name="weatherdb",
        client_factory=mongomock.MongoClient,
    )
    storage.connect()
    yield storage
    storage.close()
