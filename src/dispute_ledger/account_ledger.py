from typing import Dict, List, Optional

from dispute_ledger.models import Account


class AccountLedger:
    """
    Client accounts keyed by client id.
    Accounts are immutable snapshots: read one, derive a new one, apply it.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}

    def get_or_create(self, client_id: int) -> Account:
        """
        Get existing account or a zeroed one.

        The zeroed account is inserted right away, before the caller knows
        whether its record will succeed. A client whose every record failed
        (say, a lone dispute of an unknown tx) is therefore still listed in the
        output with zero balances. Leaving the insert to apply() would drop such
        clients from the output instead. Balances never change here.
        """
        account = self._accounts.get(client_id)
        if account is None:
            account = Account(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def apply(self, account: Account) -> None:
        """Store the new snapshot for account.client_id."""
        self._accounts[account.client_id] = account

    def get(self, client_id: int) -> Optional[Account]:
        return self._accounts.get(client_id)

    def get_all_accounts(self) -> Dict[int, Account]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def sorted_accounts(self) -> List[Account]:
        return [self._accounts[client_id] for client_id in sorted(self._accounts)]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
