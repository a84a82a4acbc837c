"""Reporting Module - Scan summary and result file"""

from .report import ReportAggregator, ScanReport, ScanSummary, build_report, load_report

__all__ = ['ReportAggregator', 'ScanReport', 'ScanSummary', 'build_report', 'load_report']
