# tests/common/test_exceptions.py
"""
Тесты доменных ошибок.
"""

import pytest

from cashlink.api.errors import status_code_for
from cashlink.common.exceptions import (
    AmountOutOfRange,
    InvalidTransition,
    NotFound,
    NotPending,
    ProviderUnavailable,
    ServiceNotOffered,
    SettlementError,
    StorageUnavailable,
    Unauthorized,
)


class TestSettlementErrors:
    """Тесты иерархии ошибок."""

    def test_details_kept(self) -> None:
        error = NotFound("нет записи", record_id="tx-1")

        assert error.message == "нет записи"
        assert error.details == {"record_id": "tx-1"}
        assert error.code == "not_found"

    def test_invalid_transition_message(self) -> None:
        error = InvalidTransition("completed", "cancelled")

        assert "completed" in error.message
        assert error.details == {"current": "completed", "target": "cancelled"}

    def test_not_pending_is_invalid_transition(self) -> None:
        error = NotPending("rejected", "completed")

        assert isinstance(error, InvalidTransition)
        assert error.code == "not_pending"

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (NotFound("x"), 404),
            (Unauthorized("x"), 403),
            (InvalidTransition("a", "b"), 409),
            (NotPending("a", "b"), 409),
            (ProviderUnavailable("x"), 409),
            (AmountOutOfRange("x"), 422),
            (ServiceNotOffered("x"), 422),
            (StorageUnavailable("x"), 503),
            (SettlementError("x"), 400),
        ],
    )
    def test_http_status(self, error: SettlementError, status_code: int) -> None:
        assert status_code_for(error) == status_code
