"""
Base address derivation paths for wallet accounts

The table below is the compatibility contract with previously created wallets:

    purpose  = 44 for single signer wallets (or legacy multisig), 48 otherwise
    coinCode = 1 on testnet; 0 for btc; 145 for bch (0 when legacy); 60 for eth
    path     = m/<purpose>'/<coinCode>'/<account>'
"""
from bitkey.core import KEY, InvalidArgument, UnknownCoin

__all__ = ["get_base_address_derivation_path", "validate_account", "validate_signer_count"]


def validate_account(account) -> int:
    if isinstance(account, bool) or not isinstance(account, int) or account < 0:
        raise InvalidArgument(f"Account must be a non-negative integer: {account!r}")
    return account


def validate_signer_count(n) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise InvalidArgument(f"Signer count n must be an integer >= 1: {n!r}")
    return n


def get_base_address_derivation_path(coin: str, network: str, account: int, n: int,
                                     use44_for_multisig: bool = False, use0_for_bch: bool = False) -> str:
    validate_account(account)
    validate_signer_count(n)

    purpose = KEY.SINGLE_SIG_PURPOSE if (n == 1 or use44_for_multisig) else KEY.MULTISIG_PURPOSE

    if network == KEY.TESTNET:
        coin_code = KEY.TESTNET_COIN_TYPE
    elif coin == KEY.BCH and use0_for_bch:
        coin_code = KEY.LEGACY_BCH_COIN_TYPE
    elif coin in KEY.COIN_TYPES:
        coin_code = KEY.COIN_TYPES[coin]
    else:
        raise UnknownCoin(f"Unknown coin: {coin}")

    return f"m/{purpose}'/{coin_code}'/{account}'"
