from decimal import Decimal
from pydantic import BaseModel


class WalletResponseModel(BaseModel):
    client_id: int
    amount: Decimal
