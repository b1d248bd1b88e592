"""Portfolio and transaction history reports.

Returns plain rows plus text renderings; presentation is left to callers.
"""

from dataclasses import dataclass
from typing import Optional

from src.market import QuoteSource
from src.models.account import Account
from src.trading import portfolio_value


@dataclass(frozen=True)
class HoldingValuation:
    symbol: str
    quantity: int
    price: Optional[float]

    @property
    def value(self) -> float:
        # Unquoted holdings are valued at 0
        return self.price * self.quantity if self.price is not None else 0.0


def holdings_report(
    account: Account, quote_source: QuoteSource
) -> list[HoldingValuation]:
    rows = []
    for symbol, quantity in account.ledger.items():
        quote = quote_source.lookup(symbol)
        rows.append(
            HoldingValuation(
                symbol=symbol,
                quantity=quantity,
                price=quote.price if quote is not None else None,
            )
        )
    return rows


def format_portfolio(account: Account, quote_source: QuoteSource) -> str:
    rows = holdings_report(account, quote_source)
    if not rows:
        lines = ["Portfolio is empty."]
    else:
        lines = ["Portfolio holdings:"]
        for row in rows:
            price = f"${row.price:.2f}" if row.price is not None else "n/a"
            lines.append(
                f"{row.symbol}: {row.quantity} shares @ {price} each "
                f"(Total: ${row.value:.2f})"
            )
        lines.append(
            f"Total portfolio value: ${portfolio_value(account, quote_source):.2f}"
        )
    lines.append(f"Available balance: ${account.balance:.2f}")
    return "\n".join(lines)


def format_history(account: Account) -> str:
    transactions = account.history()
    if not transactions:
        return "No transactions yet."
    return "\n".join(
        ["Transaction History:"] + [tx.describe() for tx in transactions]
    )
