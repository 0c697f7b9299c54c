from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_balance_aggregator
from api.schemas import BalanceTotalRequest, BalanceTotalResponse
from application.formatting import format_rate
from application.services import BalanceAggregator
from domain.models import Account, Wallet

router = APIRouter(prefix='/api/balances', tags=['balances'])


@router.post(
	'/total',
	response_model=BalanceTotalResponse,
	status_code=status.HTTP_200_OK,
	summary='Total of all wallet balances in the reporting currency',
)
async def total_balance(
	request: BalanceTotalRequest,
	aggregator: Annotated[BalanceAggregator, Depends(get_balance_aggregator)],
) -> BalanceTotalResponse:
	accounts = [
		Account(
			id=account.id,
			name=account.name,
			wallets=[Wallet(currency=w.currency, balance=w.balance) for w in account.wallets],
		)
		for account in request.accounts
	]
	total = await aggregator.total(accounts)
	return BalanceTotalResponse(
		amount=total.amount,
		display_amount=format_rate(total.amount, total.currency),
		currency=total.currency,
		rates=total.rates,
		refreshed_at=total.refreshed_at,
	)
