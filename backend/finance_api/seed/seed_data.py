from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from brand_ledger.wallet_ledger import WalletLedger
from finance_api.db.session import Base, engine, session_scope
from finance_api.db.store import SqlLedgerStore
from finance_api.models import Employee, MonthlyBudget, Wallet

DEMO_BRAND_ID = "00000000-0000-0000-0000-000000000001"


def seed(session: Session, brand_id: str = DEMO_BRAND_ID) -> None:
    employees = [
        Employee(
            brand_id=brand_id,
            name="Mona Adel",
            position="Operations lead",
            monthly_salary=Decimal("12000"),
            start_date=date(2023, 6, 1),
        ),
        Employee(
            brand_id=brand_id,
            name="Karim Nabil",
            position="Customer support",
            monthly_salary=Decimal("7000"),
            start_date=date(2024, 2, 1),
            auto_payment=True,
        ),
    ]
    basic = Wallet(
        brand_id=brand_id,
        name="Main bank account",
        type="bank",
        current_balance=0,
        monthly_budget=Decimal("30000"),
        is_basic=True,
    )
    petty = Wallet(brand_id=brand_id, name="Petty cash", type="cash", current_balance=0)
    session.add_all([*employees, basic, petty])
    session.add(
        MonthlyBudget(brand_id=brand_id, month=date.today().strftime("%Y-%m"), budget_limit=Decimal("50000"))
    )
    session.flush()

    # opening balances go through the ledger so each has a transaction row
    ledger = WalletLedger(SqlLedgerStore(session))
    ledger.credit(brand_id, basic.id, Decimal("100000"), "Opening balance", date.today())
    ledger.credit(brand_id, petty.id, Decimal("2500"), "Opening balance", date.today())
    session.commit()


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        seed(session)


if __name__ == "__main__":
    main()
