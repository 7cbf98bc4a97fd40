"""Console views: rejected batches, balance listing, posting journal."""

from ledger_kernel.domain.accounts import AccountKind, AccountRegistry
from ledger_kernel.domain.dtos import BatchResult, PostingSet
from scripts.cli.util import fmt_amount

W = 72


def show_rejected(results: tuple[BatchResult, ...]) -> None:
    """Print every defect of every rejected batch."""
    print()
    print("=" * W)
    print("  REJECTED BATCHES".center(W))
    print("=" * W)
    for result in results:
        if result.is_success:
            continue
        print(f"\n  {result.batch_label} ({len(result.errors)} error(s))")
        for error in result.errors:
            print(f"    [{error.code}] {error}")
    print()


def show_balances(registry: AccountRegistry, posting_set: PostingSet) -> None:
    """Balance per account in chart order; sum accounts total their range."""
    print()
    print("=" * W)
    print("  BALANCES".center(W))
    print("=" * W)
    print(f"  {'Konto':>7}  {'Navn':<36} {'Type':<12} {'Saldo':>10}")
    print(f"  {'-'*7}  {'-'*36} {'-'*12} {'-'*10}")
    for account in registry:
        if account.kind is AccountKind.SUM_RANGE:
            balance = posting_set.balance_of_accounts(
                m.number for m in registry.members_of(account)
            )
        else:
            balance = posting_set.balance_of(account.number)
        print(
            f"  {account.number:>7}  {account.name[:36]:<36} "
            f"{account.type_token[:12]:<12} {fmt_amount(balance):>10}"
        )
    print(f"\n  Postings: {len(posting_set)}  (VAT generated: {posting_set.generated_count})")
    print(f"  Total: {fmt_amount(posting_set.total())}")
    print()


def show_journal(posting_set: PostingSet) -> None:
    """Every posting in ledger order."""
    print()
    print("=" * W)
    print("  JOURNAL".center(W))
    print("=" * W)
    for posting in posting_set.postings:
        print(
            f"  {posting.day.isoformat()}  {posting.voucher_number:>8}  {posting.account:>7}  "
            f"{posting.display_text[:30]:<30} {fmt_amount(posting.amount):>10}"
        )
    print()
