"""
In-memory one-time codes for e-mail verification and password reset.

One active code per (identifier, purpose): issuing again replaces the old
code, and a successful check deletes it. Codes never expire on a timer and
are lost on restart.
"""

from __future__ import annotations

import enum
import logging
import threading

from . import security

logger = logging.getLogger(__name__)


class Purpose(str, enum.Enum):
    VERIFY = "verify"
    RESET = "reset"


class CodeError(RuntimeError):
    pass


class CodeNotFoundError(CodeError):
    pass


class CodeMismatchError(CodeError):
    pass


class CodeRegistry:
    def __init__(self) -> None:
        self._codes: dict[tuple[str, Purpose], str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(identifier: str, purpose: Purpose | str) -> tuple[str, Purpose]:
        return security.normalize_email(identifier), Purpose(purpose)

    def issue(self, identifier: str, purpose: Purpose | str) -> str:
        key = self._key(identifier, purpose)
        code = security.generate_code()
        with self._lock:
            replaced = key in self._codes
            self._codes[key] = code
        logger.info("code_issued identifier=%s purpose=%s replaced=%s", key[0], key[1].value, replaced)
        return code

    def verify(self, identifier: str, purpose: Purpose | str, candidate: str) -> None:
        """
        Consume the code for (identifier, purpose) if `candidate` matches.

        Raises CodeNotFoundError when nothing is pending and CodeMismatchError
        when the candidate is wrong; a mismatch leaves the code in place.
        """
        key = self._key(identifier, purpose)
        with self._lock:
            expected = self._codes.get(key)
            if expected is None:
                raise CodeNotFoundError(f"No {key[1].value} code pending for {key[0]}.")
            # TODO: compare with hmac.compare_digest and cap failed attempts per identifier.
            if expected != (candidate or "").strip():
                raise CodeMismatchError(f"Invalid {key[1].value} code for {key[0]}.")
            del self._codes[key]
        logger.info("code_consumed identifier=%s purpose=%s", key[0], key[1].value)

    def discard(self, identifier: str, purpose: Purpose | str) -> None:
        key = self._key(identifier, purpose)
        with self._lock:
            self._codes.pop(key, None)


_registry = CodeRegistry()


def registry() -> CodeRegistry:
    return _registry
