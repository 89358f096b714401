"""Storage package"""
from .report_folder import ReportFolder, read_report, write_report

__all__ = ["ReportFolder", "read_report", "write_report"]
