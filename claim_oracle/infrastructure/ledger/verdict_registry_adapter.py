"""VerdictRegistry contract implementation of the ledger provider interface."""

import asyncio
import logging
from typing import Optional

from eth_account import Account
from pydantic import BaseModel, Field
from web3 import Web3
from web3.exceptions import TimeExhausted

from ...domain.ports.ledger_provider import LedgerProvider, ProofFailureReason, ProofSubmissionError

logger = logging.getLogger(__name__)

VERDICT_REGISTRY_ABI = [
    {
        "inputs": [
            {"internalType": "bytes32", "name": "verdictHash", "type": "bytes32"},
            {"internalType": "string", "name": "verdict", "type": "string"},
        ],
        "name": "storeVerdict",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "verdictHash", "type": "bytes32"},
            {"indexed": False, "internalType": "string", "name": "verdict", "type": "string"},
            {"indexed": False, "internalType": "uint256", "name": "timestamp", "type": "uint256"},
        ],
        "name": "VerdictStored",
        "type": "event",
    },
]


class VerdictRegistryConfig(BaseModel):
    """Configuration for the VerdictRegistry adapter."""

    rpc_url: Optional[str] = None
    private_key: Optional[str] = None
    contract_address: Optional[str] = None
    chain_id: int = Field(default=11155111, description="Sepolia")
    gas_limit: int = Field(default=200_000, gt=0)
    receipt_timeout: float = Field(default=120.0, description="Seconds to wait for inclusion")
    request_timeout: float = Field(default=10.0, description="RPC request timeout in seconds")


def _failure_reason(error: Exception) -> ProofFailureReason:
    if "insufficient funds" in str(error).lower():
        return ProofFailureReason.INSUFFICIENT_FUNDS
    return ProofFailureReason.REJECTED


class VerdictRegistryAdapter(LedgerProvider):
    """Writes verdict digests with ``storeVerdict(bytes32, string)``.

    Transactions are signed locally with the configured key. web3 calls are
    blocking, so the whole submission runs in a worker thread.
    """

    def __init__(
        self,
        config: Optional[VerdictRegistryConfig] = None,
        provider_name: str = "VerdictRegistry",
        w3: Optional[Web3] = None,
    ):
        self._config = config or VerdictRegistryConfig()
        self._name = provider_name
        self._w3 = w3

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_configured(self) -> bool:
        config = self._config
        return bool(config.private_key and config.contract_address and (config.rpc_url or self._w3))

    def _web3(self) -> Web3:
        if self._w3 is None:
            self._w3 = Web3(Web3.HTTPProvider(
                self._config.rpc_url,
                request_kwargs={"timeout": self._config.request_timeout},
            ))
        return self._w3

    async def submit(self, digest: bytes, verdict_label: str) -> str:
        if len(digest) != 32:
            raise ValueError(f"verdict digest must be 32 bytes, got {len(digest)}")
        if not self.is_configured:
            raise ProofSubmissionError(
                "PRIVATE_KEY, VERDICT_REGISTRY_ADDRESS or LEDGER_RPC_URL not set",
                ProofFailureReason.MISSING_CREDENTIALS,
            )
        return await asyncio.to_thread(self._submit_blocking, digest, verdict_label)

    def _submit_blocking(self, digest: bytes, verdict_label: str) -> str:
        config = self._config
        private_key = config.private_key
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        try:
            account = Account.from_key(private_key)
        except Exception as e:
            raise ProofSubmissionError(f"Invalid signing key: {e}", ProofFailureReason.SIGNING_FAILED)

        w3 = self._web3()
        try:
            contract = w3.eth.contract(
                address=Web3.to_checksum_address(config.contract_address),
                abi=VERDICT_REGISTRY_ABI,
            )
            tx = contract.functions.storeVerdict(digest, verdict_label).build_transaction({
                "from": account.address,
                "nonce": w3.eth.get_transaction_count(account.address),
                "gas": config.gas_limit,
                "gasPrice": w3.eth.gas_price,
                "chainId": config.chain_id,
            })
        except Exception as e:
            raise ProofSubmissionError(f"Could not build storeVerdict transaction: {e}", _failure_reason(e))

        try:
            signed_tx = account.sign_transaction(tx)
        except Exception as e:
            raise ProofSubmissionError(f"Signing failed: {e}", ProofFailureReason.SIGNING_FAILED)

        try:
            tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            raise ProofSubmissionError(f"Transaction rejected: {e}", _failure_reason(e))

        tx_id = Web3.to_hex(tx_hash)
        logger.info(f"⏳ storeVerdict sent: {tx_id}")

        try:
            receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=config.receipt_timeout)
        except TimeExhausted as e:
            raise ProofSubmissionError(f"No receipt for {tx_id}: {e}", ProofFailureReason.TIMEOUT)
        except Exception as e:
            raise ProofSubmissionError(f"Receipt polling failed for {tx_id}: {e}", ProofFailureReason.REJECTED)

        if receipt["status"] != 1:
            raise ProofSubmissionError(f"storeVerdict reverted in {tx_id}", ProofFailureReason.REVERTED)

        logger.info(f"✅ Verdict confirmed in block {receipt['blockNumber']}: {tx_id}")
        return tx_id
