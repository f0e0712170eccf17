# cashlink/api/routes/transactions.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from cashlink.api.dependencies import get_actor_id, get_transaction_service
from cashlink.api.schemas import CreateTransactionRequest, ReasonRequest, TransitionResponse
from cashlink.common.constants import TransactionStatus
from cashlink.core.transactions.models import CashTransaction
from cashlink.core.transactions.service import CashTransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])

TxResponse = TransitionResponse[CashTransaction]


@router.post("/", response_model=CashTransaction, status_code=201)
async def create_transaction(
    request: CreateTransactionRequest,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return await service.create(
        customer_id=actor_id,
        provider_id=request.provider_id,
        service_type=request.service_type,
        network=request.network,
        amount=request.amount,
        notes=request.notes,
        location=request.location,
    )


@router.get("/mine", response_model=list[CashTransaction])
async def list_my_transactions(
    limit: int = Query(50, ge=1, le=200),
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return await service.list_for_customer(actor_id, limit=limit)


@router.get("/incoming", response_model=list[CashTransaction])
async def list_incoming_transactions(
    status: Optional[TransactionStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return await service.list_for_provider(actor_id, status=status, limit=limit)


@router.get("/{transaction_id}", response_model=CashTransaction)
async def get_transaction(
    transaction_id: str,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return await service.get(transaction_id, actor_id)


@router.post("/{transaction_id}/customer-confirm", response_model=TxResponse)
async def customer_confirm(
    transaction_id: str,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return TxResponse.from_result(await service.customer_confirm(transaction_id, actor_id))


@router.post("/{transaction_id}/agent-confirm", response_model=TxResponse)
async def agent_confirm(
    transaction_id: str,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    return TxResponse.from_result(await service.agent_confirm(transaction_id, actor_id))


@router.post("/{transaction_id}/cancel", response_model=TxResponse)
async def cancel_transaction(
    transaction_id: str,
    request: Optional[ReasonRequest] = None,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    reason = request.reason if request else None
    return TxResponse.from_result(await service.cancel(transaction_id, actor_id, reason))


@router.post("/{transaction_id}/reject", response_model=TxResponse)
async def reject_transaction(
    transaction_id: str,
    request: Optional[ReasonRequest] = None,
    actor_id: str = Depends(get_actor_id),
    service: CashTransactionService = Depends(get_transaction_service),
):
    reason = request.reason if request else None
    return TxResponse.from_result(await service.reject(transaction_id, actor_id, reason))
