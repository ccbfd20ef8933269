from orm_doctor.output.base import ReportOutput
from orm_doctor.output.console import ConsoleReportOutput
from orm_doctor.output.sqs import SqsReportOutput

__all__ = ["ReportOutput", "ConsoleReportOutput", "SqsReportOutput"]
