from fastapi import Depends
from sqlmodel import Session

from .database import get_session
from .services.reports import ReportService
from .services.transactions import TransactionService
from .store.base import TransactionStore
from .store.sql import SqlTransactionStore


def get_store(session: Session = Depends(get_session)) -> TransactionStore:
    return SqlTransactionStore(session)


def get_transaction_service(store: TransactionStore = Depends(get_store)) -> TransactionService:
    return TransactionService(store)


def get_report_service(store: TransactionStore = Depends(get_store)) -> ReportService:
    return ReportService(store)
