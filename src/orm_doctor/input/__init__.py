from orm_doctor.input.base import TraceInput
from orm_doctor.input.json_trace import JsonTraceInput
from orm_doctor.input.logfile import LogFileInput, PostgresLogLineParser
from orm_doctor.input.manual import ManualInput

__all__ = [
    "TraceInput",
    "ManualInput",
    "LogFileInput",
    "PostgresLogLineParser",
    "JsonTraceInput",
]
