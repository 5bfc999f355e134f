"""Tests for the order status controller.

Tests verify:
- The transition table and the controls offered to each caller
- Authorization and reachability checks before any write
- The per-order busy flag (Redis SET NX EX + compare-and-delete release)
- Persistence failure leaves the status untouched
- Two-step cancellation (request issues a token, confirm consumes it)
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from yafoy.core.exceptions import ConflictError, PermissionDeniedError, StorageUnavailableError
from yafoy.models.order import OrderStatus
from yafoy.services.order_status import (
    OrderStatusController,
    allowed_targets,
    available_actions,
)

from conftest import scalar_result


class TestTransitionTable:
    """Test the lifecycle table and offered controls."""

    def test_pending_targets(self):
        assert allowed_targets(OrderStatus.PENDING) == (
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        )

    def test_confirmed_only_starts(self):
        assert allowed_targets("confirmed") == (OrderStatus.IN_PROGRESS,)

    def test_confirmed_actions_offer_no_refusal(self):
        actions = available_actions(OrderStatus.CONFIRMED, is_provider=True)
        assert [(a.target, a.label) for a in actions] == [(OrderStatus.IN_PROGRESS, "Démarrer")]

    def test_in_progress_only_completes(self):
        assert allowed_targets(OrderStatus.IN_PROGRESS) == (OrderStatus.COMPLETED,)

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_states_offer_nothing(self, status):
        assert allowed_targets(status) == ()
        assert available_actions(status, is_provider=True) == []

    def test_pending_actions_for_provider(self):
        actions = available_actions(OrderStatus.PENDING, is_provider=True)

        assert [a.target for a in actions] == [OrderStatus.CONFIRMED, OrderStatus.CANCELLED]
        assert [a.label for a in actions] == ["Accepter", "Refuser"]
        assert [a.requires_confirmation for a in actions] == [False, True]

    def test_in_progress_action_label(self):
        actions = available_actions(OrderStatus.IN_PROGRESS, is_provider=True)
        assert [(a.target, a.label) for a in actions] == [(OrderStatus.COMPLETED, "Terminer")]

    def test_no_controls_for_other_parties(self):
        """A caller who is not the fulfilling party sees no controls."""
        for status in OrderStatus:
            assert available_actions(status, is_provider=False) == []


class TestTransition:
    """Test immediate (non-destructive) transitions."""

    @pytest.mark.asyncio
    async def test_confirm_pending_order(self, mock_db, redis_service, mock_redis, mock_order, provider_session):
        mock_db.execute = AsyncMock(side_effect=[scalar_result(mock_order), scalar_result("pending"), MagicMock()])
        observer = AsyncMock()
        controller = OrderStatusController(mock_db, redis_service)

        change = await controller.transition(
            mock_order.order_id, OrderStatus.CONFIRMED, provider_session, on_status_change=observer
        )

        assert change.status == OrderStatus.CONFIRMED
        assert change.previous_status == OrderStatus.PENDING
        assert change.message == "La commande a été confirmée."
        assert mock_order.status == "confirmed"
        mock_db.commit.assert_awaited_once()
        observer.assert_awaited_once_with(change)

        # Busy flag taken on the order and released afterwards
        lock_call = mock_redis.set.call_args
        assert lock_call.args[0] == f"lock:order:{mock_order.order_id}"
        assert lock_call.kwargs["nx"] is True
        mock_redis.register_script.return_value.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_is_single_field(self, mock_db, redis_service, mock_order, provider_session):
        mock_db.execute = AsyncMock(side_effect=[scalar_result(mock_order), scalar_result("pending"), MagicMock()])
        controller = OrderStatusController(mock_db, redis_service)

        await controller.transition(mock_order.order_id, OrderStatus.CONFIRMED, provider_session)

        update_stmt = mock_db.execute.call_args_list[2].args[0]
        compiled = update_stmt.compile()
        assert update_stmt.table.name == "orders"
        assert set(compiled.params) == {"status", "order_id_1"}
        assert compiled.params["status"] == "confirmed"

    @pytest.mark.asyncio
    async def test_non_provider_refused(self, mock_db, redis_service, mock_redis, mock_order, client_session):
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(PermissionDeniedError):
            await controller.transition(mock_order.order_id, OrderStatus.CONFIRMED, client_session)

        assert mock_db.execute.await_count == 1
        mock_db.commit.assert_not_awaited()
        mock_redis.set.assert_not_awaited()
        assert mock_order.status == "pending"

    @pytest.mark.asyncio
    async def test_unreachable_target_refused(self, mock_db, redis_service, mock_order, provider_session):
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.transition(mock_order.order_id, OrderStatus.COMPLETED, provider_session)

        assert exc_info.value.code == "INVALID_TRANSITION"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_terminal_order_refused(self, mock_db, redis_service, mock_order, provider_session):
        mock_order.status = OrderStatus.COMPLETED.value
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError):
            await controller.transition(mock_order.order_id, OrderStatus.IN_PROGRESS, provider_session)

    @pytest.mark.asyncio
    async def test_cancel_requires_confirmation(self, mock_db, redis_service, mock_order, provider_session):
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.transition(mock_order.order_id, OrderStatus.CANCELLED, provider_session)

        assert exc_info.value.code == "CONFIRMATION_REQUIRED"
        assert mock_order.status == "pending"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_busy_order_refused(self, mock_db, redis_service, mock_redis, mock_order, provider_session):
        """A second transition while one is in flight is refused."""
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        mock_redis.set = AsyncMock(return_value=None)
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.transition(mock_order.order_id, OrderStatus.CONFIRMED, provider_session)

        assert exc_info.value.code == "TRANSITION_IN_PROGRESS"
        assert mock_db.execute.await_count == 1
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persistence_failure_keeps_status(
        self, mock_db, redis_service, mock_redis, mock_order, provider_session
    ):
        mock_db.execute = AsyncMock(
            side_effect=[
                scalar_result(mock_order),
                scalar_result("pending"),
                OperationalError("UPDATE orders", {}, Exception("connection lost")),
            ]
        )
        observer = AsyncMock()
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(StorageUnavailableError) as exc_info:
            await controller.transition(
                mock_order.order_id, OrderStatus.CONFIRMED, provider_session, on_status_change=observer
            )

        assert exc_info.value.message == "Impossible de mettre à jour le statut."
        assert mock_order.status == "pending"
        mock_db.rollback.assert_awaited_once()
        observer.assert_not_awaited()
        # Busy flag released even on failure
        mock_redis.register_script.return_value.assert_awaited_once()


class TestCancellation:
    """Test the two-step cancellation path."""

    @pytest.mark.asyncio
    async def test_request_alone_does_not_mutate(
        self, mock_db, redis_service, mock_redis, mock_order, provider_session
    ):
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        request = await controller.request_cancellation(mock_order.order_id, provider_session)

        assert request.token
        assert request.expires_in == 300
        mock_redis.set.assert_awaited_once_with(
            f"confirm:order_cancel:{mock_order.order_id}", request.token, ex=300
        )
        assert mock_order.status == "pending"
        assert mock_db.execute.await_count == 1
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_request_refused_when_not_reachable(self, mock_db, redis_service, mock_order, provider_session):
        mock_order.status = OrderStatus.IN_PROGRESS.value
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError):
            await controller.request_cancellation(mock_order.order_id, provider_session)

    @pytest.mark.asyncio
    async def test_confirm_with_valid_token(self, mock_db, redis_service, mock_order, provider_session):
        mock_db.execute = AsyncMock(side_effect=[scalar_result(mock_order), scalar_result("pending"), MagicMock()])
        observer = AsyncMock()
        controller = OrderStatusController(mock_db, redis_service)

        change = await controller.confirm_cancellation(
            mock_order.order_id, "token-123", provider_session, on_status_change=observer
        )

        assert change.status == OrderStatus.CANCELLED
        assert change.message == "La commande a été annulée."
        assert mock_order.status == "cancelled"
        mock_db.commit.assert_awaited_once()
        observer.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_confirm_with_wrong_token(self, mock_db, redis_service, mock_redis, mock_order, provider_session):
        mock_db.execute = AsyncMock(side_effect=[scalar_result(mock_order), scalar_result("pending")])
        mock_redis.register_script = MagicMock(return_value=AsyncMock(return_value=0))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.confirm_cancellation(mock_order.order_id, "wrong", provider_session)

        assert exc_info.value.code == "INVALID_CONFIRMATION"
        assert mock_order.status == "pending"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_confirm_by_client_refused(self, mock_db, redis_service, mock_order, client_session):
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(PermissionDeniedError):
            await controller.confirm_cancellation(mock_order.order_id, "token", client_session)

    @pytest.mark.asyncio
    async def test_confirmed_order_cannot_be_cancelled(
        self, mock_db, redis_service, mock_redis, mock_order, provider_session
    ):
        mock_order.status = OrderStatus.CONFIRMED.value
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as request_exc:
            await controller.request_cancellation(mock_order.order_id, provider_session)
        with pytest.raises(ConflictError) as confirm_exc:
            await controller.confirm_cancellation(mock_order.order_id, "token", provider_session)

        assert request_exc.value.code == "INVALID_TRANSITION"
        assert confirm_exc.value.code == "INVALID_TRANSITION"
        assert mock_order.status == "confirmed"
        mock_redis.set.assert_not_awaited()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_busy_order_keeps_token(self, mock_db, redis_service, mock_redis, mock_order, provider_session):
        """A busy refusal must not use up the provider's confirmation."""
        mock_db.execute = AsyncMock(return_value=scalar_result(mock_order))
        mock_redis.set = AsyncMock(return_value=None)
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.confirm_cancellation(mock_order.order_id, "token-123", provider_session)

        assert exc_info.value.code == "TRANSITION_IN_PROGRESS"
        mock_redis.register_script.return_value.assert_not_awaited()
        mock_db.commit.assert_not_awaited()


class TestConcurrentChange:
    """The status is re-read once the busy flag is held."""

    @pytest.mark.asyncio
    async def test_status_changed_before_lock(
        self, mock_db, redis_service, mock_redis, mock_order, provider_session
    ):
        # Loaded as pending; another request confirmed it before the lock was taken
        mock_db.execute = AsyncMock(
            side_effect=[scalar_result(mock_order), scalar_result(OrderStatus.CONFIRMED.value)]
        )
        observer = AsyncMock()
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.transition(
                mock_order.order_id, OrderStatus.CONFIRMED, provider_session, on_status_change=observer
            )

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert mock_db.execute.await_count == 2
        mock_db.commit.assert_not_awaited()
        observer.assert_not_awaited()
        mock_redis.register_script.return_value.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_after_concurrent_start_keeps_token(
        self, mock_db, redis_service, mock_redis, mock_order, provider_session
    ):
        mock_db.execute = AsyncMock(
            side_effect=[scalar_result(mock_order), scalar_result(OrderStatus.CONFIRMED.value)]
        )
        controller = OrderStatusController(mock_db, redis_service)

        with pytest.raises(ConflictError) as exc_info:
            await controller.confirm_cancellation(mock_order.order_id, "token-123", provider_session)

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert mock_order.status == "confirmed"
        # Only the lock release ran the compare-and-delete script
        script = mock_redis.register_script.return_value
        assert script.await_count == 1
        assert script.await_args.kwargs["keys"] == [f"lock:order:{mock_order.order_id}"]
        mock_db.commit.assert_not_awaited()
