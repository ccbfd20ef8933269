from orm_doctor.input.logfile.adapter import LogFileInput
from orm_doctor.input.logfile.parser import ParsedStatement, PostgresLogLineParser

__all__ = ["LogFileInput", "ParsedStatement", "PostgresLogLineParser"]
