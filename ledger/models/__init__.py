from .entry import LedgerEntry
from .report_snapshot import ReportSnapshot
