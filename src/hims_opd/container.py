from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .cash.mysql_cash_repository import MySQLCashSummaryRepository
from .cash.repository import CashSummaryRepository
from .cash.service import CashService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .doctors.mysql_doctor_repository import MySQLDoctorRepository
from .doctors.repository import DoctorRepository
from .doctors.service import DoctorService
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.repository import ExpenseRepository
from .expenses.service import ExpenseService
from .opd_services.mysql_opd_service_repository import MySQLOpdServiceRepository
from .opd_services.repository import OpdServiceRepository
from .opd_services.service import OpdServiceService
from .patients.mysql_patient_repository import MySQLPatientRepository
from .patients.repository import PatientRepository
from .patients.service import PatientService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .receipts.mysql_receipt_repository import MySQLReceiptRepository
from .receipts.repository import ReceiptRepository
from .receipts.service import ReceiptService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    shifts_repo: ShiftRepository
    cash_repo: CashSummaryRepository
    receipts_repo: ReceiptRepository
    expenses_repo: ExpenseRepository
    payments_repo: PaymentRepository
    doctors_repo: DoctorRepository
    opd_services_repo: OpdServiceRepository
    patients_repo: PatientRepository
    reports_repo: ReportRepository

    shift_service: ShiftService
    cash_service: CashService
    receipt_service: ReceiptService
    expense_service: ExpenseService
    payment_service: PaymentService
    doctor_service: DoctorService
    opd_service_service: OpdServiceService
    patient_service: PatientService
    report_service: ReportService


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    shifts_repo: ShiftRepository,
    cash_repo: CashSummaryRepository,
    receipts_repo: ReceiptRepository,
    expenses_repo: ExpenseRepository,
    payments_repo: PaymentRepository,
    doctors_repo: DoctorRepository,
    opd_services_repo: OpdServiceRepository,
    patients_repo: PatientRepository,
    reports_repo: ReportRepository,
    clock: Callable = now_local,
) -> Container:
    """Build services on top of already constructed repositories (MySQL or in-memory)."""

    shift_service = ShiftService(shifts_repo, clock=clock)
    cash_service = CashService(cash_repo, shift_service, clock=clock)
    receipt_service = ReceiptService(receipts_repo, shift_service, doctors_repo, clock=clock)
    expense_service = ExpenseService(expenses_repo, shift_service, clock=clock)
    payment_service = PaymentService(payments_repo, shift_service, doctors_repo, clock=clock)
    doctor_service = DoctorService(doctors_repo)
    opd_service_service = OpdServiceService(opd_services_repo)
    patient_service = PatientService(patients_repo, receipts_repo, clock=clock)
    report_service = ReportService(
        reports_repo,
        shifts_repo,
        receipts_repo,
        expenses_repo,
        payments_repo,
        cash_repo,
    )

    return Container(
        conn=conn,
        shifts_repo=shifts_repo,
        cash_repo=cash_repo,
        receipts_repo=receipts_repo,
        expenses_repo=expenses_repo,
        payments_repo=payments_repo,
        doctors_repo=doctors_repo,
        opd_services_repo=opd_services_repo,
        patients_repo=patients_repo,
        reports_repo=reports_repo,
        shift_service=shift_service,
        cash_service=cash_service,
        receipt_service=receipt_service,
        expense_service=expense_service,
        payment_service=payment_service,
        doctor_service=doctor_service,
        opd_service_service=opd_service_service,
        patient_service=patient_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        shifts_repo=MySQLShiftRepository(conn),
        cash_repo=MySQLCashSummaryRepository(conn),
        receipts_repo=MySQLReceiptRepository(conn),
        expenses_repo=MySQLExpenseRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        doctors_repo=MySQLDoctorRepository(conn),
        opd_services_repo=MySQLOpdServiceRepository(conn),
        patients_repo=MySQLPatientRepository(conn),
        reports_repo=MySQLReportRepository(conn),
    )
