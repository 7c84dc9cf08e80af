"""In-memory model of a replicated file store with self-healing placement."""

from .config import StoreConfig  # noqa: F401
from .runtime import ReplicaStoreRuntime  # noqa: F401
