# PATH: core/signing.py
"""
Typed-signature domains for RELAY (EIP-712).

Two domains are in play:

ORDER DOMAIN (this executor deployment)
  EIP712Domain(name="RelayExecutor", version="1", chainId, verifyingContract=executor)
  primaryType Order(address maker,address inputToken,uint256 inputAmount,
                    address outputToken,uint256 minAmountOut,uint256 expiry,
                    uint256 nonce,address authorizedExecutor)

PERMIT DOMAIN (signature-based transfer service)
  EIP712Domain(name="Permit2", chainId, verifyingContract=transfer service)
  primaryType PermitWitnessTransferFrom(TokenPermissions permitted,
                    address spender,uint256 nonce,uint256 deadline,Order witness)

Different domains and primary types: a signature never verifies across
deployments, chains, or the order/permit boundary.
"""

from typing import Any, Dict, List

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak

from core.constants import (
    EXECUTOR_DOMAIN_NAME,
    EXECUTOR_DOMAIN_VERSION,
    ErrorCode,
    PERMIT2_DOMAIN_NAME,
    ZERO_ADDRESS,
)
from core.exceptions import SignatureError
from core.models import Order, TransferAuthorization
from core.validators import normalize_address

ORDER_TYPE: List[Dict[str, str]] = [
    {"name": "maker", "type": "address"},
    {"name": "inputToken", "type": "address"},
    {"name": "inputAmount", "type": "uint256"},
    {"name": "outputToken", "type": "address"},
    {"name": "minAmountOut", "type": "uint256"},
    {"name": "expiry", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "authorizedExecutor", "type": "address"},
]

TOKEN_PERMISSIONS_TYPE: List[Dict[str, str]] = [
    {"name": "token", "type": "address"},
    {"name": "amount", "type": "uint256"},
]

PERMIT_WITNESS_TRANSFER_FROM_TYPE: List[Dict[str, str]] = [
    {"name": "permitted", "type": "TokenPermissions"},
    {"name": "spender", "type": "address"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
    {"name": "witness", "type": "Order"},
]

# Witness type string as the transfer service expects it (types sorted after the field)
WITNESS_TYPE_STRING = (
    "Order witness)"
    "Order(address maker,address inputToken,uint256 inputAmount,address outputToken,"
    "uint256 minAmountOut,uint256 expiry,uint256 nonce,address authorizedExecutor)"
    "TokenPermissions(address token,uint256 amount)"
)


def order_message(order: Order) -> Dict[str, Any]:
    """Order fields under their typed-data (camelCase) names."""
    return {
        "maker": order.maker,
        "inputToken": order.input_token,
        "inputAmount": order.input_amount,
        "outputToken": order.output_token,
        "minAmountOut": order.min_amount_out,
        "expiry": order.expiry,
        "nonce": order.nonce,
        "authorizedExecutor": order.authorized_executor,
    }


def _digest(signable: SignableMessage) -> bytes:
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def _recover(signable: SignableMessage, signature: bytes, code: ErrorCode) -> str:
    try:
        return Account.recover_message(signable, signature=signature).lower()
    except Exception as exc:  # eth_keys raises several unrelated types for bad bytes
        raise SignatureError(
            f"Malformed signature: {exc}",
            ErrorCode.MALFORMED_SIGNATURE,
            {"signature": "0x" + bytes(signature).hex(), "expected_code": code.value},
        ) from exc


class SignatureDomain:
    """
    Order signature domain bound to one executor deployment.

    Usage:
        domain = SignatureDomain(chain_id=1, verifying_contract=executor_address)
        sig = domain.sign_order(order, private_key)
        domain.verify_order(order, sig)  # raises SignatureError on mismatch
    """

    def __init__(self, chain_id: int, verifying_contract: str):
        self.chain_id = int(chain_id)
        self.verifying_contract = normalize_address(verifying_contract)

    @property
    def domain(self) -> Dict[str, Any]:
        return {
            "name": EXECUTOR_DOMAIN_NAME,
            "version": EXECUTOR_DOMAIN_VERSION,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }

    def typed_data(self, order: Order) -> Dict[str, Any]:
        return {
            "types": {
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "version", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                    {"name": "verifyingContract", "type": "address"},
                ],
                "Order": ORDER_TYPE,
            },
            "primaryType": "Order",
            "domain": self.domain,
            "message": order_message(order),
        }

    def signable(self, order: Order) -> SignableMessage:
        return encode_typed_data(full_message=self.typed_data(order))

    def domain_separator(self) -> str:
        # The header only depends on the domain, so any order will do
        probe = Order(ZERO_ADDRESS, ZERO_ADDRESS, 0, ZERO_ADDRESS, 0, 0, 0)
        return "0x" + bytes(self.signable(probe).header).hex()

    def order_hash(self, order: Order) -> str:
        """EIP-712 struct hash of the order (domain independent)."""
        return "0x" + bytes(self.signable(order).body).hex()

    def order_digest(self, order: Order) -> str:
        """Full EIP-712 digest that the maker signs."""
        return "0x" + _digest(self.signable(order)).hex()

    def sign_order(self, order: Order, private_key: Any) -> bytes:
        signed = Account.sign_message(self.signable(order), private_key=private_key)
        return bytes(signed.signature)

    def recover_order_signer(self, order: Order, signature: bytes) -> str:
        return _recover(self.signable(order), signature, ErrorCode.INVALID_ORDER_SIGNATURE)

    def verify_order(self, order: Order, signature: bytes) -> None:
        """
        Require the order signature to recover to the maker.

        Raises:
            SignatureError: malformed signature or wrong signer
        """
        signer = self.recover_order_signer(order, signature)
        if signer != order.maker:
            raise SignatureError(
                "Order signature does not match maker",
                ErrorCode.INVALID_ORDER_SIGNATURE,
                {"maker": order.maker, "recovered": signer},
            )


class PermitDomain:
    """
    Permit-with-witness signature domain of the transfer service.

    The maker signs the permit fields, the spender (executor) and the full
    Order as witness in one payload.
    """

    def __init__(self, chain_id: int, verifying_contract: str):
        self.chain_id = int(chain_id)
        self.verifying_contract = normalize_address(verifying_contract)

    @property
    def domain(self) -> Dict[str, Any]:
        return {
            "name": PERMIT2_DOMAIN_NAME,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }

    def typed_data(
        self,
        permit: TransferAuthorization,
        spender: str,
        witness: Order,
    ) -> Dict[str, Any]:
        return {
            "types": {
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                    {"name": "verifyingContract", "type": "address"},
                ],
                "PermitWitnessTransferFrom": PERMIT_WITNESS_TRANSFER_FROM_TYPE,
                "TokenPermissions": TOKEN_PERMISSIONS_TYPE,
                "Order": ORDER_TYPE,
            },
            "primaryType": "PermitWitnessTransferFrom",
            "domain": self.domain,
            "message": {
                "permitted": {"token": permit.token, "amount": permit.amount},
                "spender": normalize_address(spender),
                "nonce": permit.nonce,
                "deadline": permit.deadline,
                "witness": order_message(witness),
            },
        }

    def signable(
        self,
        permit: TransferAuthorization,
        spender: str,
        witness: Order,
    ) -> SignableMessage:
        return encode_typed_data(full_message=self.typed_data(permit, spender, witness))

    def sign_permit(
        self,
        permit: TransferAuthorization,
        spender: str,
        witness: Order,
        private_key: Any,
    ) -> bytes:
        signable = self.signable(permit, spender, witness)
        return bytes(Account.sign_message(signable, private_key=private_key).signature)

    def recover_permit_signer(
        self,
        permit: TransferAuthorization,
        spender: str,
        witness: Order,
        signature: bytes,
    ) -> str:
        return _recover(
            self.signable(permit, spender, witness),
            signature,
            ErrorCode.INVALID_PERMIT_SIGNATURE,
        )
