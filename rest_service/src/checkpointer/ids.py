import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def _random_suffix() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))


def _unix_ms() -> int:
    return time.time_ns() // 1_000_000


def generate_checkpoint_id() -> str:
    """``checkpoint_<unix_ms>_<9 base36 chars>``; safe across processes."""
    return f"checkpoint_{_unix_ms()}_{_random_suffix()}"


def generate_task_id() -> str:
    """Synthetic task id for channel values committed with a checkpoint."""
    return f"task_{_unix_ms()}_{_random_suffix()}"
