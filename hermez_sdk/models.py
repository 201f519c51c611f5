"""
Data models for the Hermez SDK.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SentTransaction(BaseModel):
    """A transaction that has been signed and broadcast"""
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(..., alias="transactionHash")
    from_address: str = Field(..., alias="from")
    nonce: int
    gas: int
    gas_price: int = Field(..., alias="gasPrice")


class Block(BaseModel):
    """Header summary of an Ethereum block"""
    model_config = ConfigDict(populate_by_name=True)

    num: int = Field(..., alias="number")
    timestamp: datetime
    hash: str
    parent_hash: str = Field(..., alias="parentHash")
