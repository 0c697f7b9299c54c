from pydantic import BaseModel, Field, ValidationInfo, field_validator


class SelectPairRequest(BaseModel):
	source: str = Field(..., min_length=3, max_length=3)
	target: str = Field(..., min_length=3, max_length=3)
	length: int | None = Field(None, ge=1, le=30, description='History window length in units')

	@field_validator('source', 'target')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()

	@field_validator('target')
	@classmethod
	def currencies_must_be_different(cls, v: str, info: ValidationInfo):
		if info.data and 'source' in info.data and v == info.data['source']:
			raise ValueError('source and target must be different')
		return v

	class ConfigDict:
		json_schema_extra = {'example': {'source': 'EUR', 'target': 'IDR', 'length': 30}}


class TimeRangeRequest(BaseModel):
	length: int = Field(..., ge=1, le=30)


class WalletIn(BaseModel):
	currency: str = Field(..., min_length=3, max_length=3)
	balance: float

	@field_validator('currency')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()


class AccountIn(BaseModel):
	id: str
	name: str | None = None
	wallets: list[WalletIn] = Field(default_factory=list)


class BalanceTotalRequest(BaseModel):
	accounts: list[AccountIn]

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'accounts': [
					{'id': 'acc-1', 'wallets': [{'currency': 'USD', 'balance': 100}]},
					{'id': 'acc-2', 'wallets': [{'currency': 'IDR', 'balance': 1000000}]},
				]
			}
		}
