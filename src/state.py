from typing import Dict, List

from models import ClientAccount


class AccountLedger:
    """
    In-memory account state, keyed by client id.
    The only place balances live; accounts are created on first reference.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def drain(self) -> List[ClientAccount]:
        """Hand over all accounts and leave the ledger empty."""
        accounts = list(self._accounts.values())
        self._accounts = {}
        return accounts

    def __len__(self) -> int:
        return len(self._accounts)
