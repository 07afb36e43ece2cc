from .sui import CoinRef, SuiRpcClient, SuiRpcError, SuiTimeoutError
from .wallet import HttpWalletSigner, SignedTransaction, WalletSigner

__all__ = [
    "CoinRef",
    "SuiRpcClient",
    "SuiRpcError",
    "SuiTimeoutError",
    "HttpWalletSigner",
    "SignedTransaction",
    "WalletSigner",
]
