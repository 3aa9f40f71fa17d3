__version__ = "0.1.0"

__all__ = [
    # Errors
    "NetpayError",
    "InputError",
    "IdentityError",
    "TransportError",
    "UnconfirmedError",
    "RevertedError",
    "OperationCancelled",
    # Configuration
    "Invocation",
    # Utilities
    "to_base_units",
    "content_id_to_bytes",
    # Identity
    "AllocationIdentity",
    "generate_allocation_identity",
    "load_private_key",
    # Chain
    "ContractCall",
    "encode_call",
    "RpcClient",
    "TransactionReceipt",
    "await_receipt",
    "SignedTransaction",
    "submit",
    "send_and_confirm",
    # Workflows
    "open_allocation",
    "close_allocation",
    "send_payment",
    "build_batch",
]

from .errors import (
    IdentityError,
    InputError,
    NetpayError,
    OperationCancelled,
    RevertedError,
    TransportError,
    UnconfirmedError,
)
from .config import Invocation
from .utils import content_id_to_bytes, to_base_units
from .identity.allocation import AllocationIdentity, generate_allocation_identity
from .identity.keys import load_private_key
from .chain.abi import ContractCall, encode_call
from .chain.rpc import RpcClient
from .chain.receipt import TransactionReceipt, await_receipt
from .chain.tx import SignedTransaction, send_and_confirm, submit
from .commands.open_allocation import open_allocation
from .commands.close_allocation import close_allocation
from .commands.send_payment import send_payment
from .commands.batch import build_batch
