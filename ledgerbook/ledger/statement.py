"""
Account statements: the plain-text summary of one debtor that gets
shared by message or printed.
"""

from typing import Optional

from ledgerbook.models.inventory import BusinessProfile
from ledgerbook.models.ledger import DebtorType, SubjectView


DEFAULT_RECENT_LIMIT = 10


def balance_label(debtor_type: DebtorType, balance: float) -> str:
    """Human wording for the direction of a balance."""
    if balance == 0:
        return "Settled"
    if DebtorType(debtor_type) == DebtorType.CUSTOMER:
        return "Owes you" if balance > 0 else "In credit"
    return "You owe" if balance < 0 else "Owes you (supplier)"


def balance_text(view: SubjectView) -> str:
    """e.g. ``Owes you: 60.00``"""
    label = balance_label(view.debtor.debtor_type, view.balance)
    return f"{label}: {abs(view.balance):.2f}"


def render_statement(
    view: SubjectView,
    profile: Optional[BusinessProfile] = None,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> str:
    """
    Render a statement for one debtor.

    Only the ``recent_limit`` newest transactions are listed; a line of
    ``...`` marks that older ones were left out.
    """
    lines = []
    if profile is not None and profile.name:
        lines.append(profile.name)
        if profile.phone:
            lines.append(f"Tel: {profile.phone}")
        lines.append("")

    debtor = view.debtor
    lines.append(f"Account statement: {debtor.name} ({debtor.debtor_type.value})")
    if debtor.phone:
        lines.append(f"Phone: {debtor.phone}")
    lines.append(balance_text(view))
    lines.append(
        f"Total debt: {view.progress.total_debt:.2f}  "
        f"Total payments: {view.progress.total_payments:.2f}  "
        f"Paid: {view.progress.progress_percent:.0f}%"
    )

    if view.transactions:
        lines.append("")
        lines.append("Recent transactions:")
        for t in view.transactions[:max(recent_limit, 0)]:
            sign = "+" if t.is_debt else "-"
            lines.append(
                f"{t.date.strftime('%Y-%m-%d')}  {t.polarity.value:<7}  "
                f"{sign}{t.amount:.2f}  {t.description}"
            )
        if len(view.transactions) > recent_limit:
            lines.append("...")

    return "\n".join(lines)
